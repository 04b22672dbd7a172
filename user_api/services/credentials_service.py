from __future__ import annotations

import logging

from user_api.core.errors import UserNotFoundError
from user_api.core.metrics import AUTH_ATTEMPTS
from user_api.models.principal import Principal, UserCredentials
from user_api.repos.user_repo import UserRepo
from user_api.services.password_hasher import Hasher

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Loads identity and authorities for a login (the user's email).

    Read-only: never creates users and never re-hashes stored passwords.
    """

    def __init__(self, user_repo: UserRepo, hasher: Hasher) -> None:
        self._user_repo = user_repo
        self._hasher = hasher

    def resolve(self, login: str) -> UserCredentials:
        user = self._user_repo.find_by_email(login)
        if user is None:
            raise UserNotFoundError(f"User not found with email: {login}")
        return UserCredentials(
            login=user.email,
            password_hash=user.password_hash,
            authorities=frozenset(r.authority for r in user.roles),
        )

    def authenticate(self, login: str, secret: str) -> Principal | None:
        """Return the Principal for (login, secret), or None if they don't match."""
        try:
            credentials = self.resolve(login)
        except UserNotFoundError:
            logger.warning("Authentication failed: unknown login=%s", login)
            AUTH_ATTEMPTS.labels(result="unknown_login").inc()
            return None

        if not self._hasher.verify(secret, credentials.password_hash):
            logger.warning("Authentication failed: bad secret for login=%s", login)
            AUTH_ATTEMPTS.labels(result="bad_secret").inc()
            return None

        AUTH_ATTEMPTS.labels(result="success").inc()
        return Principal(login=credentials.login, authorities=credentials.authorities)
