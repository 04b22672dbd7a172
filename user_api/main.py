from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from user_api.api.docs import router as docs_router
from user_api.api.envelope import register_exception_handlers
from user_api.api.health import router as health_router
from user_api.api.metrics_endpoint import router as metrics_router
from user_api.api.users import router as users_router
from user_api.container import Container, build_container
from user_api.core.config import SETTINGS
from user_api.core.logging import setup_logging
from user_api.middleware.metrics import MetricsMiddleware
from user_api.middleware.request_context import (
    RequestContextMiddleware,
    install_log_filter,
)
from user_api.services.bootstrap import run_bootstrap

logger = logging.getLogger(__name__)

API_TITLE = "OpenApi specification - user-api"
API_VERSION = "1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container: Container = app.state.container
    # Seed roles and default accounts before the first request.  Any
    # failure here propagates and aborts startup.
    run_bootstrap(container.role_service, container.user_service)
    try:
        yield
    finally:
        container.dispose()


def _openapi_factory(app: FastAPI):
    def _openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            contact=app.contact,
            license_info=app.license_info,
            servers=app.servers,
            terms_of_service=app.terms_of_service,
        )
        schema.setdefault("components", {}).setdefault("securitySchemes", {})[
            "basicAuth"
        ] = {"type": "http", "scheme": "basic", "description": "Email + password"}
        schema["security"] = [{"basicAuth": []}]
        app.openapi_schema = schema
        return schema

    return _openapi


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a container (built from SETTINGS if omitted)."""
    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description="User directory API: CRUD over users with role-based access",
        contact={"name": "user-api maintainers", "email": "maintainers@example.com"},
        license_info={"name": "MIT", "identifier": "MIT"},
        servers=[
            {"url": f"http://localhost:{SETTINGS.port}", "description": "Local ENV"},
        ],
        terms_of_service="https://example.com/terms",
        lifespan=lifespan,
        # The descriptor is served at /v3/api-docs behind the admin guard.
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    app.state.container = container or build_container(SETTINGS)
    app.openapi = _openapi_factory(app)  # type: ignore[method-assign]

    register_exception_handlers(app)

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) → Metrics → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(docs_router)
    app.include_router(users_router)
    return app


# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_log_filter()

app = create_app()

logger.info(
    "user-api configured  env=%s log_level=%s port=%d database=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "sql" if SETTINGS.database_url else "in-memory",
)
