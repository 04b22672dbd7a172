from __future__ import annotations

import logging
from typing import Protocol

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

logger = logging.getLogger(__name__)


class Hasher(Protocol):
    def hash(self, plain_password: str) -> str: ...
    def verify(self, plain_password: str, password_hash: str) -> bool: ...


class Argon2Hasher:
    """One-way password hashing with Argon2id.

    Argon2 hash strings encode parameters + salt, so hashes produced under
    older work factors keep verifying after the factors are raised.
    """

    def __init__(
        self,
        *,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, plain_password: str) -> str:
        if not plain_password:
            raise ValueError("password must be non-empty")
        return self._ph.hash(plain_password)

    # verify() must catch Argon2 exceptions and return False
    def verify(self, plain_password: str, password_hash: str) -> bool:
        if not plain_password or not password_hash:
            return False
        try:
            return self._ph.verify(password_hash, plain_password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            logger.warning("Stored password hash could not be verified")
            return False
