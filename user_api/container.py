"""Composition root.

Builds the stores, the hasher, the services and the credential resolver
once per process.  The FastAPI app keeps the result on app.state and the
request dependencies read it from there.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Engine

from user_api.core.config import Settings
from user_api.db.engine import build_engine, build_session_factory, create_schema
from user_api.repos.role_repo import InMemoryRoleRepo, RoleRepo
from user_api.repos.sql_role_repo import SqlRoleRepo
from user_api.repos.sql_user_repo import SqlUserRepo
from user_api.repos.user_repo import InMemoryUserRepo, UserRepo
from user_api.services.credentials_service import CredentialResolver
from user_api.services.password_hasher import Argon2Hasher, Hasher
from user_api.services.role_service import RoleService
from user_api.services.user_mapper import UserMapper
from user_api.services.users_service import UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    user_repo: UserRepo
    role_repo: RoleRepo
    hasher: Hasher
    role_service: RoleService
    user_service: UserService
    user_mapper: UserMapper
    credentials: CredentialResolver
    engine: Engine | None = None

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engine disposed")


def build_container(settings: Settings, *, hasher: Hasher | None = None) -> Container:
    engine: Engine | None = None
    user_repo: UserRepo
    role_repo: RoleRepo

    if settings.database_url:
        engine = build_engine(settings.database_url, echo=settings.is_dev)
        if not settings.is_prod:
            create_schema(engine)
        session_factory = build_session_factory(engine)
        role_repo = SqlRoleRepo(session_factory)
        user_repo = SqlUserRepo(session_factory)
        logger.info("Using SQL repositories: %s", engine.url.render_as_string())
    else:
        role_repo = InMemoryRoleRepo()
        user_repo = InMemoryUserRepo(role_repo)
        logger.info("No DATABASE_URL configured; using in-memory repositories")

    if hasher is None:
        hasher = Argon2Hasher(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
        )

    role_service = RoleService(role_repo)
    user_service = UserService(user_repo, role_service, hasher)

    return Container(
        user_repo=user_repo,
        role_repo=role_repo,
        hasher=hasher,
        role_service=role_service,
        user_service=user_service,
        user_mapper=UserMapper(role_service),
        credentials=CredentialResolver(user_repo, hasher),
        engine=engine,
    )
