"""Request / response shapes for the /userAPI endpoints.

Field validators reuse the rules in user_api/core/validation.py, so a body
that passes here also passes UserService.is_valid().  Each field reports
at most one message; the exception handler turns the pydantic errors into
the {field: message} map returned with "Validation failed for the request."
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from user_api.core import validation


class UserRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Ignored on create, required on update.  Strict ints: JSON true is
    # not an id or an age.
    id: StrictInt | None = None
    name: str | None = Field(default=None, validate_default=True)
    age: StrictInt | None = Field(default=None, validate_default=True)
    email: str | None = Field(default=None, validate_default=True)
    password_plain: str | None = Field(default=None, validate_default=True)
    role_names: set[str] = Field(default_factory=set)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        _raise_if(validation.check_name(v))
        return v.strip() if v is not None else v

    @field_validator("age")
    @classmethod
    def _check_age(cls, v: int | None) -> int | None:
        _raise_if(validation.check_age(v))
        return v

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str | None) -> str | None:
        _raise_if(validation.check_email(v))
        return v.strip() if v is not None else v

    @field_validator("password_plain")
    @classmethod
    def _check_password(cls, v: str | None) -> str | None:
        _raise_if(validation.check_password(v))
        return v

    @field_validator("role_names")
    @classmethod
    def _normalize_role_names(cls, v: set[str]) -> set[str]:
        names = {n.strip().upper() for n in v}
        if "" in names:
            raise ValueError("Role names must be non-empty.")
        return names


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    age: int
    role_names: list[str]


class Envelope(BaseModel):
    """Shape of every response body, success or error."""

    status: int
    message: str
    data: Any = None


def _raise_if(message: str | None) -> None:
    if message is not None:
        raise ValueError(message)
