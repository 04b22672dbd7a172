from __future__ import annotations

import base64
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from user_api.container import Container, build_container
from user_api.core.config import Settings
from user_api.main import create_app
from user_api.models.role import ADMIN, USER, Role
from user_api.repos.role_repo import InMemoryRoleRepo
from user_api.repos.user_repo import InMemoryUserRepo
from user_api.services.password_hasher import Argon2Hasher
from user_api.services.role_service import RoleService
from user_api.services.users_service import UserService

# Minimum Argon2 work factor: tests hash on every create and verify on
# every request.
FAST_HASHER = Argon2Hasher(time_cost=1, memory_cost=8, parallelism=1)

ADMIN_LOGIN = ("admin@example.com", "admin")
USER_LOGIN = ("user@example.com", "user")

STRONG_PASSWORD = "Secret#1"


def make_settings(database_url: str | None = None) -> Settings:
    return Settings(
        app_env="test",
        log_level="info",
        log_json=False,
        port=8000,
        database_url=database_url,
        argon2_time_cost=1,
        argon2_memory_cost=32,
    )


def basic_auth(login: str, secret: str) -> dict[str, str]:
    """Authorization header for HTTP Basic."""
    token = base64.b64encode(f"{login}:{secret}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def admin_auth() -> dict[str, str]:
    return basic_auth(*ADMIN_LOGIN)


def user_auth() -> dict[str, str]:
    return basic_auth(*USER_LOGIN)


def user_body(**overrides: object) -> dict[str, object]:
    """A create/update body that passes every field rule."""
    body: dict[str, object] = {
        "name": "Alice",
        "age": 30,
        "email": "alice@example.com",
        "password_plain": STRONG_PASSWORD,
        "role_names": ["USER"],
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def container() -> Container:
    """Fresh in-memory stores per test; bootstrap runs when the client starts."""
    return build_container(make_settings(), hasher=FAST_HASHER)


@pytest.fixture
def client(container: Container) -> Iterator[TestClient]:
    with TestClient(create_app(container)) as c:
        yield c


# ---------------------------------------------------------------------------
# Service fixtures (no HTTP)
# ---------------------------------------------------------------------------


@pytest.fixture
def role_repo() -> InMemoryRoleRepo:
    repo = InMemoryRoleRepo()
    repo.save(Role(id=1, name=ADMIN))
    repo.save(Role(id=2, name=USER))
    return repo


@pytest.fixture
def user_repo(role_repo: InMemoryRoleRepo) -> InMemoryUserRepo:
    return InMemoryUserRepo(role_repo)


@pytest.fixture
def role_service(role_repo: InMemoryRoleRepo) -> RoleService:
    return RoleService(role_repo)


@pytest.fixture
def user_service(
    user_repo: InMemoryUserRepo, role_service: RoleService
) -> UserService:
    return UserService(user_repo, role_service, FAST_HASHER)
