"""Domain error taxonomy.

Services raise these; only the transport layer (api/envelope.py) knows
which HTTP status each one becomes.
"""

from __future__ import annotations


class UserServiceError(Exception):
    """Base class for errors raised by the user directory core."""

    default_message = "User operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UserNotFoundError(UserServiceError):
    default_message = "User not found"


class UserAlreadyExistsError(UserServiceError):
    default_message = "User already exists"

    @classmethod
    def for_email(cls, email: str) -> UserAlreadyExistsError:
        return cls(f"A user with email {email} already exists.")


class InvalidUserInputError(UserServiceError):
    default_message = "The provided user details are invalid."


class RequestValidationFailedError(UserServiceError):
    """Inbound body rejected before it reached the service.

    Carries one message per offending field.
    """

    default_message = "Validation failed for the request."

    def __init__(self, errors: dict[str, str], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = dict(errors)


class UserPersistenceError(UserServiceError):
    """The store refused a write for a reason other than a duplicate email."""

    default_message = "Could not save the user to the database"
