"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in user_api/models/.
Repos convert between rows and dataclasses; rows never leave a repo.

    user_info(id PK, name, email UNIQUE, age, password)
    role(id PK, name UNIQUE)
    user_roles(user_id FK, role_id FK)
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from user_api.db.engine import Base

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column(
        "user_id",
        Integer,
        ForeignKey("user_info.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("role_id", Integer, ForeignKey("role.id"), primary_key=True),
)


class RoleRow(Base):
    __tablename__ = "role"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False
    )  # ADMIN|USER


class UserRow(Base):
    __tablename__ = "user_info"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False
    )
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    password: Mapped[str] = mapped_column(Text, nullable=False)  # argon2 hash
    roles: Mapped[set[RoleRow]] = relationship(
        secondary=user_roles, lazy="selectin"
    )
