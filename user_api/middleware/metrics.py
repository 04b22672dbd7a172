"""Prometheus instrumentation for every HTTP request except scrapes.

Labels use the matched route template ("/userAPI/id/{user_id}"), not the
raw path, so label cardinality stays bounded by the route table.  Paths
that match no route share the label "unmatched".
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from user_api.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

UNMATCHED = "unmatched"
_NOT_INSTRUMENTED = frozenset({"/metrics"})


def route_template(request: Request) -> str:
    """Path template of the route that served the request.

    The router records the matched route in the ASGI scope on the way in;
    by the time call_next returns it is there for every routed request.
    """
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template if isinstance(template, str) else UNMATCHED


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _NOT_INSTRUMENTED:
            return await call_next(request)

        status_code = "500"  # unless a response comes back
        started = time.perf_counter()
        with ACTIVE_REQUESTS.track_inprogress():
            try:
                response = await call_next(request)
                status_code = str(response.status_code)
            finally:
                elapsed = time.perf_counter() - started
                endpoint = route_template(request)
                REQUEST_COUNT.labels(request.method, endpoint, status_code).inc()
                REQUEST_DURATION.labels(request.method, endpoint).observe(elapsed)
        return response
