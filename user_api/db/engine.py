"""SQLAlchemy engine and session factory.

The store contracts are synchronous, so this is the plain (blocking)
engine.  Each repo call opens its own session from the factory and
commits or rolls back before returning.

When DATABASE_URL is not configured nothing here is used and the app
runs on in-memory repositories.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


def _is_sqlite_memory(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    if _is_sqlite_memory(database_url):
        # One shared connection, otherwise every session sees an empty
        # in-memory database.
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url, echo=echo, connect_args={"check_same_thread": False}
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet (dev/test only).

    Production schemas are managed by Alembic.
    """
    # Import table module so Base.metadata sees all table definitions.
    import user_api.db.tables  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database schema ensured on %s", engine.url.render_as_string())
