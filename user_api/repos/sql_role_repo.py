"""SQLAlchemy implementation of RoleRepo."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from user_api.db.tables import RoleRow
from user_api.models.role import Role
from user_api.repos.errors import StoreIntegrityError


class SqlRoleRepo:
    """Satisfies the RoleRepo Protocol; one session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def find_by_name(self, name: str) -> Role | None:
        with self._session_factory() as session:
            stmt = select(RoleRow).where(RoleRow.name == name)
            row = session.execute(stmt).scalar_one_or_none()
            return None if row is None else row_to_role(row)

    def find_by_names(self, names: Iterable[str]) -> set[Role]:
        wanted = set(names)
        if not wanted:
            return set()
        with self._session_factory() as session:
            stmt = select(RoleRow).where(RoleRow.name.in_(wanted))
            return {row_to_role(row) for row in session.execute(stmt).scalars()}

    def find_by_id(self, role_id: int) -> Role | None:
        with self._session_factory() as session:
            row = session.get(RoleRow, role_id)
            return None if row is None else row_to_role(row)

    def save(self, role: Role) -> Role:
        with self._session_factory() as session:
            row = session.get(RoleRow, role.id) if role.id is not None else None
            if row is None:
                row = RoleRow(name=role.name)
                if role.id is not None:
                    row.id = role.id
                session.add(row)
            else:
                row.name = role.name
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise StoreIntegrityError("role_name", str(e.orig)) from e
            return row_to_role(row)


def row_to_role(row: RoleRow) -> Role:
    return Role(id=row.id, name=row.name)
