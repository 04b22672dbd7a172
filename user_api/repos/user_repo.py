from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol

from user_api.models.user import User
from user_api.repos.errors import EMAIL_CONSTRAINT, ROLE_CONSTRAINT, StoreIntegrityError
from user_api.repos.role_repo import RoleRepo


class UserRepo(Protocol):
    def find_by_id(self, user_id: int) -> User | None: ...
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_name(self, name: str) -> User | None: ...
    def list_all(self) -> list[User]: ...
    def exists(self, user_id: int) -> bool: ...
    def save(self, user: User) -> User: ...
    def delete(self, user_id: int) -> None: ...


class InMemoryUserRepo:
    """Dict-backed UserRepo, indexed by id and by email.

    Every read and write holds the lock.  The email check and the write are
    one atomic step, so two concurrent saves of the same email cannot both
    succeed.
    """

    def __init__(self, role_repo: RoleRepo | None = None) -> None:
        self._lock = threading.Lock()
        self._role_repo = role_repo
        self._by_id: dict[int, User] = {}
        self._by_email: dict[str, User] = {}
        self._next_id = 1

    def find_by_id(self, user_id: int) -> User | None:
        with self._lock:
            return self._by_id.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            return self._by_email.get(email)

    def find_by_name(self, name: str) -> User | None:
        with self._lock:
            return next((u for u in self._by_id.values() if u.name == name), None)

    def list_all(self) -> list[User]:
        with self._lock:
            return [self._by_id[k] for k in sorted(self._by_id)]

    def exists(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._by_id

    def save(self, user: User) -> User:
        with self._lock:
            holder = self._by_email.get(user.email)
            if holder is not None and holder.id != user.id:
                raise StoreIntegrityError(EMAIL_CONSTRAINT, user.email)
            self._check_roles(user)

            if user.id is None:
                user = replace(user, id=self._next_id)
            self._next_id = max(self._next_id, user.id + 1)

            previous = self._by_id.get(user.id)
            if previous is not None:
                self._by_email.pop(previous.email, None)

            stored = user.without_password()
            self._by_id[stored.id] = stored
            self._by_email[stored.email] = stored
            return stored

    def delete(self, user_id: int) -> None:
        with self._lock:
            removed = self._by_id.pop(user_id, None)
            if removed is not None:
                self._by_email.pop(removed.email, None)

    def _check_roles(self, user: User) -> None:
        if self._role_repo is None:
            return
        for role in user.roles:
            if role.id is None or self._role_repo.find_by_id(role.id) is None:
                raise StoreIntegrityError(ROLE_CONSTRAINT, role.name)
