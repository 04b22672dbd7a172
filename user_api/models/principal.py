from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserCredentials:
    """What the auth layer needs to check one login.

    Derived from the stored user on every request; never cached.
        login: the user's email
        password_hash: stored hash the supplied secret is verified against
        authorities: "ROLE_<name>" for each of the user's roles
    """

    login: str
    password_hash: str
    authorities: frozenset[str]


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity attached to a request.

    Endpoints receive this from the auth dependency instead of raw
    Basic credentials.
    """

    login: str
    authorities: frozenset[str]

    def has_any_authority(self, authorities: set[str]) -> bool:
        return bool(self.authorities & authorities)
