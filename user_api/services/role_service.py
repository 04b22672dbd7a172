from __future__ import annotations

import logging
from collections.abc import Iterable

from user_api.models.role import Role
from user_api.repos.role_repo import RoleRepo

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, role_repo: RoleRepo) -> None:
        self._role_repo = role_repo

    def find_by_names(self, names: Iterable[str]) -> set[Role]:
        """Resolve role names to role records.

        Unknown names are dropped, so the result can be smaller than the
        input; callers decide whether that is an error.
        """
        return self._role_repo.find_by_names(names)

    def find_by_name(self, name: str) -> Role | None:
        return self._role_repo.find_by_name(name)

    def ensure_role(self, role_id: int, name: str) -> Role:
        """Persist role (role_id, name) unless a role called name exists."""
        existing = self._role_repo.find_by_name(name)
        if existing is not None:
            return existing
        role = self._role_repo.save(Role(id=role_id, name=name))
        logger.info("Created role id=%s name=%s", role.id, role.name)
        return role
