"""Request id, timing and one summary log line per request.

The request id comes from X-Request-ID when the caller sends one and is
a fresh uuid4 otherwise.  It is held in a ContextVar, so every log line
emitted while the request is in flight (including from threadpool
handlers, which copy the context) can be tied back to it.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    """Stamps the current request id on records that don't carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


def install_log_filter() -> None:
    """Attach the request-id filter to every root handler (idempotent).

    Logger-level filters don't run for records propagated from child
    loggers; handler-level filters see everything.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, _RequestContextFilter) for f in handler.filters):
            handler.addFilter(_RequestContextFilter())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(req_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.perf_counter() - started) * 1000, 1)

        # Set by the auth dependency once the caller is authenticated.
        login = getattr(request.state, "login", None)
        logger.info(
            "%s %s -> %d in %.1fms login=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            login or "-",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "login": login,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers[REQUEST_ID_HEADER] = req_id
        return response
