"""OpenAPI descriptor, served at /v3/api-docs to ADMIN callers only.

FastAPI's public /openapi.json and /docs are switched off in main.py;
this route returns the same generated document behind the admin guard.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from user_api.api.dependencies import require_admin
from user_api.models.principal import Principal

router = APIRouter(tags=["docs"])


@router.get("/v3/api-docs", include_in_schema=False)
def api_docs(
    request: Request,
    _principal: Annotated[Principal, Depends(require_admin)],
) -> dict[str, Any]:
    return request.app.openapi()
