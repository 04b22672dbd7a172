from __future__ import annotations

from dataclasses import dataclass

ADMIN = "ADMIN"
USER = "USER"

AUTHORITY_PREFIX = "ROLE_"


@dataclass(frozen=True, slots=True)
class Role:
    id: int | None
    name: str  # short uppercase identifier, unique

    @property
    def authority(self) -> str:
        return AUTHORITY_PREFIX + self.name


def authority_for(role_name: str) -> str:
    return AUTHORITY_PREFIX + role_name
