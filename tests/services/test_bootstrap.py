from __future__ import annotations

from dataclasses import replace

import pytest

from tests.conftest import FAST_HASHER
from user_api.core.errors import InvalidUserInputError
from user_api.models.role import ADMIN, USER, Role
from user_api.repos.role_repo import InMemoryRoleRepo
from user_api.repos.user_repo import InMemoryUserRepo
from user_api.services.bootstrap import run_bootstrap
from user_api.services.role_service import RoleService
from user_api.services.users_service import UserService


def _services() -> tuple[InMemoryRoleRepo, InMemoryUserRepo, RoleService, UserService]:
    role_repo = InMemoryRoleRepo()
    user_repo = InMemoryUserRepo(role_repo)
    role_service = RoleService(role_repo)
    return role_repo, user_repo, role_service, UserService(
        user_repo, role_service, FAST_HASHER
    )


def test_bootstrap_seeds_roles_and_default_accounts() -> None:
    role_repo, user_repo, role_service, user_service = _services()
    run_bootstrap(role_service, user_service)

    assert role_repo.find_by_id(1) == Role(id=1, name=ADMIN)
    assert role_repo.find_by_id(2) == Role(id=2, name=USER)

    admin = user_repo.find_by_email("admin@example.com")
    user = user_repo.find_by_email("user@example.com")
    assert admin is not None and admin.role_names == {ADMIN}
    assert user is not None and user.role_names == {USER}
    assert admin.name == "Default Admin"
    assert FAST_HASHER.verify("admin", admin.password_hash)
    assert FAST_HASHER.verify("user", user.password_hash)


def test_bootstrap_twice_changes_nothing() -> None:
    _, user_repo, role_service, user_service = _services()
    run_bootstrap(role_service, user_service)
    snapshot = user_repo.list_all()

    run_bootstrap(role_service, user_service)

    assert user_repo.list_all() == snapshot


def test_bootstrap_keeps_changed_default_account() -> None:
    """An existing account is left alone, even if it was edited since."""
    _, user_repo, role_service, user_service = _services()
    run_bootstrap(role_service, user_service)
    admin = user_repo.find_by_email("admin@example.com")
    assert admin is not None
    user_repo.save(replace(admin, age=44))

    run_bootstrap(role_service, user_service)

    reloaded = user_repo.find_by_email("admin@example.com")
    assert reloaded is not None and reloaded.age == 44


def test_default_user_with_missing_role_fails(user_service: UserService) -> None:
    with pytest.raises(InvalidUserInputError):
        user_service.ensure_default_user(
            "Nobody", "nobody@example.com", 0, "nobody", "OPERATOR"
        )
