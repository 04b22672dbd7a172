"""Liveness endpoint.

/health answers "is this process alive?" and nothing more; it touches no
store, so a slow database never gets the container restarted.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
