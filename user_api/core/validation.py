"""Field rules for user data.

Each check returns the message describing the first rule the value
breaks, or None when the value is acceptable.  The request schema turns
these into per-field errors; UserService.is_valid() requires all of them
to pass before anything reaches the store.
"""

from __future__ import annotations

import re

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
AGE_MIN = 0
AGE_MAX = 150
PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIALS = "!@#$%^&*+=?-"

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")

_DIGIT = re.compile(r"[0-9]")
_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_SPECIAL = re.compile("[" + re.escape(PASSWORD_SPECIALS) + "]")


def check_name(name: str | None) -> str | None:
    if name is None:
        return "Name cannot be null."
    if not isinstance(name, str):
        return "Name must be a string."
    trimmed = name.strip()
    if not NAME_MIN_LENGTH <= len(trimmed) <= NAME_MAX_LENGTH:
        return (
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
        )
    if not trimmed.isprintable():
        return "Name must contain only printable characters."
    return None


def check_email(email: str | None) -> str | None:
    if email is None:
        return "Email cannot be null."
    if not isinstance(email, str):
        return "Invalid email format."
    trimmed = email.strip()
    if not trimmed or EMAIL_PATTERN.fullmatch(trimmed) is None:
        return "Invalid email format."
    return None


def check_age(age: int | None) -> str | None:
    if age is None:
        return "Age cannot be null."
    if isinstance(age, bool) or not isinstance(age, int):
        return "Age must be a whole number."
    if age < AGE_MIN:
        return "Age must be positive."
    if age > AGE_MAX:
        return "Age value is unrealistic."
    return None


def check_password(password: str | None) -> str | None:
    if password is None:
        return "Password cannot be null."
    if not isinstance(password, str):
        return "Password must be a string."
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."
    if _DIGIT.search(password) is None:
        return "Password must contain at least one digit."
    if _LOWER.search(password) is None:
        return "Password must contain at least one lowercase character."
    if _UPPER.search(password) is None:
        return "Password must contain at least one uppercase character."
    if _SPECIAL.search(password) is None:
        return "Password must contain at least one special character."
    return None
