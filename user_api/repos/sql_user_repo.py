"""SQLAlchemy implementation of UserRepo."""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from user_api.db.tables import RoleRow, UserRow
from user_api.models.user import User
from user_api.repos.errors import EMAIL_CONSTRAINT, ROLE_CONSTRAINT, StoreIntegrityError
from user_api.repos.sql_role_repo import row_to_role


class SqlUserRepo:
    """Satisfies the UserRepo Protocol; one session (and transaction) per call.

    The unique constraint on user_info.email is what settles two concurrent
    creates with the same email: the loser's commit fails and surfaces as
    StoreIntegrityError(EMAIL_CONSTRAINT).
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def find_by_id(self, user_id: int) -> User | None:
        with self._session_factory() as session:
            row = session.get(UserRow, user_id)
            return None if row is None else _row_to_user(row)

    def find_by_email(self, email: str) -> User | None:
        return self._find_one(select(UserRow).where(UserRow.email == email))

    def find_by_name(self, name: str) -> User | None:
        return self._find_one(select(UserRow).where(UserRow.name == name).limit(1))

    def list_all(self) -> list[User]:
        with self._session_factory() as session:
            stmt = select(UserRow).order_by(UserRow.id)
            return [_row_to_user(row) for row in session.execute(stmt).scalars()]

    def exists(self, user_id: int) -> bool:
        with self._session_factory() as session:
            stmt = select(UserRow.id).where(UserRow.id == user_id)
            return session.execute(stmt).first() is not None

    def save(self, user: User) -> User:
        with self._session_factory() as session:
            role_rows = _load_role_rows(session, user)
            row = session.get(UserRow, user.id) if user.id is not None else None
            if row is None:
                row = UserRow()
                if user.id is not None:
                    row.id = user.id
                session.add(row)

            row.name = user.name
            row.email = user.email
            row.age = user.age
            row.password = user.password_hash
            row.roles = role_rows

            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise StoreIntegrityError(_constraint_of(e), str(e.orig)) from e
            return _row_to_user(row)

    def delete(self, user_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(UserRow, user_id)
            if row is None:
                return
            session.delete(row)  # join rows in user_roles go with it
            session.commit()

    def _find_one(self, stmt: Select[tuple[UserRow]]) -> User | None:
        with self._session_factory() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return None if row is None else _row_to_user(row)


def _load_role_rows(session: Session, user: User) -> set[RoleRow]:
    rows: set[RoleRow] = set()
    for role in user.roles:
        row = session.get(RoleRow, role.id) if role.id is not None else None
        if row is None:
            raise StoreIntegrityError(ROLE_CONSTRAINT, role.name)
        rows.add(row)
    return rows


def _constraint_of(error: IntegrityError) -> str:
    # SQLite: "UNIQUE constraint failed: user_info.email"
    # PostgreSQL: 'duplicate key value violates unique constraint "user_info_email_key"'
    text = str(error.orig).lower()
    if "email" in text:
        return EMAIL_CONSTRAINT
    if "role" in text:
        return ROLE_CONSTRAINT
    return text


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        age=row.age,
        password_hash=row.password,
        roles=frozenset(row_to_role(r) for r in row.roles),
    )
