"""
Observability: structured logging, request context, health checks.

Usage:
    from lib.observability import configure_logging, RequestContext, HealthChecker

    configure_logging(level="INFO")

    with RequestContext(user_id="u-1"):
        logger.info("Processing")  # carries request_id and user_id

    report = HealthChecker().run_all()
"""

from .context import (
    RequestContext,
    bind_user_id,
    generate_request_id,
    get_request_id,
    get_user_id,
    set_request_id,
)
from .health import HealthChecker, HealthCheckResult, HealthReport, HealthStatus
from .logging import HumanFormatter, JSONFormatter, configure_logging
from .middleware import AccessLogMiddleware, CorrelationIdMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    # Context
    "RequestContext",
    "bind_user_id",
    "generate_request_id",
    "get_request_id",
    "get_user_id",
    "set_request_id",
    # Middleware
    "AccessLogMiddleware",
    "CorrelationIdMiddleware",
    # Health
    "HealthChecker",
    "HealthCheckResult",
    "HealthReport",
    "HealthStatus",
]
