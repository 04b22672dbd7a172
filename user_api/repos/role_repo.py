from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol

from user_api.models.role import Role
from user_api.repos.errors import StoreIntegrityError


class RoleRepo(Protocol):
    def find_by_name(self, name: str) -> Role | None: ...
    def find_by_names(self, names: Iterable[str]) -> set[Role]: ...
    def find_by_id(self, role_id: int) -> Role | None: ...
    def save(self, role: Role) -> Role: ...


class InMemoryRoleRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[int, Role] = {}
        self._by_name: dict[str, Role] = {}

    def find_by_name(self, name: str) -> Role | None:
        return self._by_name.get(name)

    def find_by_names(self, names: Iterable[str]) -> set[Role]:
        return {self._by_name[n] for n in set(names) if n in self._by_name}

    def find_by_id(self, role_id: int) -> Role | None:
        return self._by_id.get(role_id)

    def save(self, role: Role) -> Role:
        with self._lock:
            if role.id is None:
                role = replace(role, id=max(self._by_id, default=0) + 1)
            existing = self._by_name.get(role.name)
            if existing is not None and existing.id != role.id:
                raise StoreIntegrityError("role_name", role.name)
            previous = self._by_id.get(role.id)
            if previous is not None:
                self._by_name.pop(previous.name, None)
            self._by_id[role.id] = role
            self._by_name[role.name] = role
            return role
