from __future__ import annotations

import logging
from dataclasses import replace

from user_api.core import validation
from user_api.core.errors import (
    InvalidUserInputError,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserPersistenceError,
)
from user_api.core.metrics import USER_OPERATIONS
from user_api.models.user import User
from user_api.repos.errors import EMAIL_CONSTRAINT, StoreIntegrityError
from user_api.repos.user_repo import UserRepo
from user_api.services.password_hasher import Hasher
from user_api.services.role_service import RoleService

logger = logging.getLogger(__name__)


class UserService:
    """CRUD over the user directory.

    Every write goes through is_valid() and the email uniqueness check, and
    replaces the caller's plaintext with a hash before reaching the store.
    The email pre-check is advisory: the store's unique constraint decides
    races, and its integrity error becomes the same conflict.
    """

    def __init__(
        self,
        user_repo: UserRepo,
        role_service: RoleService,
        hasher: Hasher,
    ) -> None:
        self._user_repo = user_repo
        self._role_service = role_service
        self._hasher = hasher

    # ---- reads ----------------------------------------------------------

    def get_by_id(self, user_id: int) -> User:
        user = self._user_repo.find_by_id(user_id)
        if user is None:
            logger.info("User lookup missed id=%s", user_id)
            raise UserNotFoundError()
        return user

    def get_by_email(self, email: str) -> User:
        user = self._user_repo.find_by_email(email)
        if user is None:
            logger.info("User lookup missed email=%s", email)
            raise UserNotFoundError()
        return user

    def list_all(self) -> list[User]:
        return self._user_repo.list_all()

    # ---- writes ---------------------------------------------------------

    def create(self, user: User) -> User:
        user = _normalized(user)
        if not self.is_valid(user):
            logger.warning("Rejected invalid user on create email=%s", user.email)
            USER_OPERATIONS.labels(operation="create", outcome="invalid").inc()
            raise InvalidUserInputError()

        if self._user_repo.find_by_email(user.email) is not None:
            logger.warning("Rejected duplicate email=%s", user.email)
            USER_OPERATIONS.labels(operation="create", outcome="conflict").inc()
            raise UserAlreadyExistsError.for_email(user.email)

        to_save = replace(
            user,
            id=None,
            password_hash=self._hasher.hash(user.password),
            password=None,
        )
        saved = self._save(to_save, "create", "Could not save the user to the database")
        logger.info("Created user id=%s email=%s", saved.id, saved.email)
        return saved

    def update(self, user: User) -> User:
        if user.id is None or not self._user_repo.exists(user.id):
            logger.warning("Rejected update of missing user id=%s", user.id)
            USER_OPERATIONS.labels(operation="update", outcome="not_found").inc()
            raise UserNotFoundError()

        user = _normalized(user)
        if not self.is_valid(user):
            logger.warning("Rejected invalid user on update id=%s", user.id)
            USER_OPERATIONS.labels(operation="update", outcome="invalid").inc()
            raise InvalidUserInputError()

        holder = self._user_repo.find_by_email(user.email)
        if holder is not None and holder.id != user.id:
            logger.warning(
                "Rejected update id=%s: email=%s held by id=%s",
                user.id,
                user.email,
                holder.id,
            )
            USER_OPERATIONS.labels(operation="update", outcome="conflict").inc()
            raise UserAlreadyExistsError.for_email(user.email)

        # Updates always carry a password and always re-hash it.
        to_save = replace(
            user,
            password_hash=self._hasher.hash(user.password),
            password=None,
        )
        saved = self._save(
            to_save, "update", "Could not update the user in the database"
        )
        logger.info("Updated user id=%s", saved.id)
        return saved

    def delete(self, user_id: int) -> None:
        if not self._user_repo.exists(user_id):
            logger.warning("Rejected delete of missing user id=%s", user_id)
            USER_OPERATIONS.labels(operation="delete", outcome="not_found").inc()
            raise UserNotFoundError()

        self._user_repo.delete(user_id)
        USER_OPERATIONS.labels(operation="delete", outcome="ok").inc()
        logger.warning("User with id=%s deleted", user_id)

    def ensure_default_user(
        self,
        name: str,
        email: str,
        age: int,
        secret: str,
        role_name: str,
    ) -> User:
        """Create a bootstrap account unless one with email already exists.

        Default accounts skip is_valid(): their well-known secrets do not
        meet the password strength rules.
        """
        existing = self._user_repo.find_by_email(email)
        if existing is not None:
            return existing

        roles = self._role_service.find_by_names({role_name})
        if not roles:
            raise InvalidUserInputError(f"Unknown role: {role_name}")

        user = User(
            id=None,
            name=name,
            email=email,
            age=age,
            password_hash=self._hasher.hash(secret),
            roles=frozenset(roles),
        )
        saved = self._save(user, "create", "Could not save the user to the database")
        logger.info(
            "Created default user id=%s email=%s role=%s", saved.id, email, role_name
        )
        return saved

    # ---- validation -----------------------------------------------------

    def is_valid(self, user: User) -> bool:
        return (
            validation.check_name(user.name) is None
            and validation.check_email(user.email) is None
            and validation.check_age(user.age) is None
            and validation.check_password(user.password) is None
        )

    def _save(self, user: User, operation: str, failure_message: str) -> User:
        try:
            saved = self._user_repo.save(user)
        except StoreIntegrityError as e:
            if e.constraint == EMAIL_CONSTRAINT:
                logger.warning("Email uniqueness violated at save email=%s", user.email)
                USER_OPERATIONS.labels(operation=operation, outcome="conflict").inc()
                raise UserAlreadyExistsError.for_email(user.email) from e
            logger.error("Store rejected %s of email=%s: %s", operation, user.email, e)
            USER_OPERATIONS.labels(operation=operation, outcome="error").inc()
            raise UserPersistenceError(failure_message) from e
        USER_OPERATIONS.labels(operation=operation, outcome="ok").inc()
        return saved


def _normalized(user: User) -> User:
    """Trim name and email; is_valid() rejects anything that is not a string."""
    name = user.name.strip() if isinstance(user.name, str) else user.name
    email = user.email.strip() if isinstance(user.email, str) else user.email
    return replace(user, name=name, email=email)
