"""Startup seeding of the canonical roles and default accounts.

Runs once per process start, before traffic is served.  Every step is
"create if missing", so re-running it leaves the stores unchanged.
"""

from __future__ import annotations

import logging

from user_api.models.role import ADMIN, USER
from user_api.services.role_service import RoleService
from user_api.services.users_service import UserService

logger = logging.getLogger(__name__)

DEFAULT_ROLES: tuple[tuple[int, str], ...] = ((1, ADMIN), (2, USER))

# (name, email, age, secret, role)
DEFAULT_USERS: tuple[tuple[str, str, int, str, str], ...] = (
    ("Default Admin", "admin@example.com", 0, "admin", ADMIN),
    ("Default User", "user@example.com", 0, "user", USER),
)


def run_bootstrap(role_service: RoleService, user_service: UserService) -> None:
    for role_id, name in DEFAULT_ROLES:
        role_service.ensure_role(role_id, name)

    for name, email, age, secret, role_name in DEFAULT_USERS:
        user_service.ensure_default_user(name, email, age, secret, role_name)

    logger.info(
        "Bootstrap complete  roles=%d default_users=%d",
        len(DEFAULT_ROLES),
        len(DEFAULT_USERS),
    )
