"""Application metrics using the Prometheus client library.

Every metric the service exposes is declared here.  Other modules import
the one they need and increment/observe it at the point of action.
Scraped from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP layer (recorded by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Argon2 verification dominates authenticated requests (~50ms at the
    # default work factor), so the interesting range starts above that.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------

USER_OPERATIONS = Counter(
    "user_operations_total",
    "User directory operations by outcome",
    ["operation", "outcome"],  # create|update|delete x ok|conflict|invalid|not_found|error
)

AUTH_ATTEMPTS = Counter(
    "auth_attempts_total",
    "HTTP Basic authentication attempts by result",
    ["result"],  # "success", "unknown_login" or "bad_secret"
)
