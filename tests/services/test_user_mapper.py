from __future__ import annotations

import pytest
from pydantic import ValidationError

from tests.conftest import STRONG_PASSWORD, user_body
from user_api.api.schemas import UserRequest
from user_api.core.errors import InvalidUserInputError
from user_api.models.role import ADMIN, USER, Role
from user_api.models.user import User
from user_api.services.role_service import RoleService
from user_api.services.user_mapper import UserMapper


@pytest.fixture
def mapper(role_service: RoleService) -> UserMapper:
    return UserMapper(role_service)


# ---- request -> entity ----


def test_to_entity_resolves_roles_and_carries_plaintext(mapper: UserMapper) -> None:
    req = UserRequest(**user_body(role_names=["user", " admin "]))
    user = mapper.to_entity(req)
    assert user.role_names == {ADMIN, USER}
    assert user.password == STRONG_PASSWORD
    assert user.password_hash == ""
    assert user.id is None


def test_to_entity_rejects_unknown_role(mapper: UserMapper) -> None:
    req = UserRequest(**user_body(role_names=["USER", "AUDITOR"]))
    with pytest.raises(InvalidUserInputError, match="Unknown role\\(s\\): AUDITOR"):
        mapper.to_entity(req)


def test_to_entity_without_roles(mapper: UserMapper) -> None:
    req = UserRequest(**user_body(role_names=[]))
    assert mapper.to_entity(req).roles == frozenset()


# ---- entity -> response ----


def test_to_response_never_exposes_password() -> None:
    user = User(
        id=3,
        name="Alice",
        email="alice@example.com",
        age=30,
        password_hash="$argon2id$secret",
        roles=frozenset({Role(id=2, name=USER), Role(id=1, name=ADMIN)}),
    )
    resp = UserMapper.to_response(user)
    dumped = resp.model_dump()
    assert dumped == {
        "id": 3,
        "name": "Alice",
        "email": "alice@example.com",
        "age": 30,
        "role_names": [ADMIN, USER],
    }


def test_to_response_list_keeps_order() -> None:
    users = [
        User(id=i, name=f"User {i}", email=f"u{i}@example.com", age=20)
        for i in (2, 1)
    ]
    assert [r.id for r in UserMapper.to_response_list(users)] == [2, 1]


# ---- request schema ----


def test_request_strips_name_and_email() -> None:
    req = UserRequest(**user_body(name="  Alice ", email=" alice@example.com "))
    assert req.name == "Alice"
    assert req.email == "alice@example.com"


def test_request_ignores_unknown_fields() -> None:
    req = UserRequest(**user_body(nickname="Al"))
    assert not hasattr(req, "nickname")


def test_request_reports_every_missing_field() -> None:
    with pytest.raises(ValidationError) as exc_info:
        UserRequest()
    fields = {err["loc"][0] for err in exc_info.value.errors()}
    assert fields == {"name", "age", "email", "password_plain"}


def test_request_rejects_blank_role_name() -> None:
    with pytest.raises(ValidationError, match="Role names must be non-empty."):
        UserRequest(**user_body(role_names=["  "]))
