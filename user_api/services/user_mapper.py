from __future__ import annotations

import logging
from collections.abc import Iterable

from user_api.api.schemas import UserRequest, UserResponse
from user_api.core.errors import InvalidUserInputError
from user_api.models.user import User
from user_api.services.role_service import RoleService

logger = logging.getLogger(__name__)


class UserMapper:
    """Converts between the HTTP shapes and the User entity."""

    def __init__(self, role_service: RoleService) -> None:
        self._role_service = role_service

    def to_entity(self, req: UserRequest) -> User:
        """Build an unsaved User from a request.

        Role names are resolved against the role store; any name that does
        not resolve is rejected rather than silently dropped.  The
        plaintext password rides along in the transient field and is hashed
        by UserService, never here.
        """
        roles = self._role_service.find_by_names(req.role_names)
        if len(roles) != len(req.role_names):
            unknown = sorted(req.role_names - {r.name for r in roles})
            logger.warning("Rejected unknown role names=%s", unknown)
            raise InvalidUserInputError(f"Unknown role(s): {', '.join(unknown)}")

        return User(
            id=req.id,
            name=req.name,  # type: ignore[arg-type]
            email=req.email,  # type: ignore[arg-type]
            age=req.age,  # type: ignore[arg-type]
            roles=frozenset(roles),
            password=req.password_plain,
        )

    @staticmethod
    def to_response(user: User) -> UserResponse:
        return UserResponse(
            id=user.id,  # type: ignore[arg-type]
            name=user.name,
            email=user.email,
            age=user.age,
            role_names=sorted(user.role_names),
        )

    @classmethod
    def to_response_list(cls, users: Iterable[User]) -> list[UserResponse]:
        return [cls.to_response(u) for u in users]
