"""SQL repositories against an in-memory SQLite database.

Each test gets a fresh engine (and so a fresh database) with the schema
created from the table metadata.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace

import pytest
from sqlalchemy import Engine, select

from user_api.db.engine import build_engine, build_session_factory, create_schema
from user_api.db.tables import user_roles
from user_api.models.role import ADMIN, USER, Role
from user_api.models.user import User
from user_api.repos.errors import EMAIL_CONSTRAINT, ROLE_CONSTRAINT, StoreIntegrityError
from user_api.repos.sql_role_repo import SqlRoleRepo
from user_api.repos.sql_user_repo import SqlUserRepo


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = build_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_roles(engine: Engine) -> SqlRoleRepo:
    repo = SqlRoleRepo(build_session_factory(engine))
    repo.save(Role(id=1, name=ADMIN))
    repo.save(Role(id=2, name=USER))
    return repo


@pytest.fixture
def sql_users(engine: Engine, sql_roles: SqlRoleRepo) -> SqlUserRepo:
    return SqlUserRepo(build_session_factory(engine))


def _user(email: str = "alice@example.com", **kw: object) -> User:
    fields: dict[str, object] = {
        "id": None,
        "name": "Alice",
        "email": email,
        "age": 30,
        "password_hash": "$argon2id$fake",
    }
    fields.update(kw)
    return User(**fields)  # type: ignore[arg-type]


# ---- roles ----


def test_role_save_keeps_explicit_id(sql_roles: SqlRoleRepo) -> None:
    assert sql_roles.find_by_id(1) == Role(id=1, name=ADMIN)
    assert sql_roles.find_by_name(USER) == Role(id=2, name=USER)


def test_role_find_by_names_drops_unknown(sql_roles: SqlRoleRepo) -> None:
    found = sql_roles.find_by_names([ADMIN, "GHOST"])
    assert found == {Role(id=1, name=ADMIN)}
    assert sql_roles.find_by_names([]) == set()


def test_role_save_rejects_duplicate_name(sql_roles: SqlRoleRepo) -> None:
    with pytest.raises(StoreIntegrityError):
        sql_roles.save(Role(id=5, name=ADMIN))


# ---- users ----


def test_user_save_and_find(sql_users: SqlUserRepo, sql_roles: SqlRoleRepo) -> None:
    roles = frozenset(sql_roles.find_by_names([USER]))
    saved = sql_users.save(_user(roles=roles))

    assert saved.id is not None
    assert saved.role_names == {USER}
    assert sql_users.find_by_id(saved.id) == saved
    assert sql_users.find_by_email("alice@example.com") == saved
    assert sql_users.find_by_name("Alice") == saved
    assert sql_users.exists(saved.id)


def test_user_list_all_ordered_by_id(sql_users: SqlUserRepo) -> None:
    sql_users.save(_user("b@example.com"))
    sql_users.save(_user("a@example.com"))
    emails = [u.email for u in sql_users.list_all()]
    assert emails == ["b@example.com", "a@example.com"]


def test_user_update_replaces_roles(
    sql_users: SqlUserRepo, sql_roles: SqlRoleRepo
) -> None:
    saved = sql_users.save(_user(roles=frozenset(sql_roles.find_by_names([USER]))))
    admin_only = frozenset(sql_roles.find_by_names([ADMIN]))
    updated = sql_users.save(replace(saved, name="Alicia", roles=admin_only))

    assert updated.id == saved.id
    reloaded = sql_users.find_by_id(saved.id)  # type: ignore[arg-type]
    assert reloaded is not None
    assert reloaded.name == "Alicia"
    assert reloaded.role_names == {ADMIN}


def test_user_duplicate_email_is_email_constraint(sql_users: SqlUserRepo) -> None:
    sql_users.save(_user())
    with pytest.raises(StoreIntegrityError) as exc_info:
        sql_users.save(_user(name="Impostor"))
    assert exc_info.value.constraint == EMAIL_CONSTRAINT
    assert len(sql_users.list_all()) == 1


def test_user_unknown_role_is_role_constraint(sql_users: SqlUserRepo) -> None:
    with pytest.raises(StoreIntegrityError) as exc_info:
        sql_users.save(_user(roles=frozenset({Role(id=77, name="GHOST")})))
    assert exc_info.value.constraint == ROLE_CONSTRAINT
    assert sql_users.list_all() == []


def test_user_delete_removes_join_rows(
    engine: Engine, sql_users: SqlUserRepo, sql_roles: SqlRoleRepo
) -> None:
    saved = sql_users.save(_user(roles=frozenset(sql_roles.find_by_names([USER]))))
    sql_users.delete(saved.id)  # type: ignore[arg-type]

    assert not sql_users.exists(saved.id)  # type: ignore[arg-type]
    assert sql_users.find_by_id(saved.id) is None  # type: ignore[arg-type]
    with engine.connect() as conn:
        assert conn.execute(select(user_roles)).all() == []
    # Roles themselves survive
    assert sql_roles.find_by_name(USER) is not None


def test_user_delete_missing_is_noop(sql_users: SqlUserRepo) -> None:
    sql_users.delete(12345)
