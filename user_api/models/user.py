from __future__ import annotations

from dataclasses import dataclass, field, replace

from user_api.models.role import Role


@dataclass(frozen=True, slots=True)
class User:
    id: int | None
    name: str
    email: str
    age: int
    password_hash: str = ""
    roles: frozenset[Role] = frozenset()  # references into the role store
    # Plaintext supplied by a caller, carried only until the service hashes
    # it.  Stores never persist it.
    password: str | None = field(default=None, repr=False, compare=False)

    @property
    def role_names(self) -> frozenset[str]:
        return frozenset(r.name for r in self.roles)

    def without_password(self) -> User:
        return replace(self, password=None)
