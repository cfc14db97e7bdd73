"""
Request admission package.

Origin/region filtering, rate limiting and progressive slow-down, composed
by RequestGate.
"""

from leave_portal.core.middleware.gate import (
    ROUTE_APPEND,
    ROUTE_LIST,
    ROUTE_QUERY,
    Admission,
    RequestGate,
)
from leave_portal.core.middleware.geo import OriginRegionFilter, get_client_ip, resolve_region
from leave_portal.core.middleware.rate_limit import (
    FixedWindowRateLimiter,
    ProgressiveSlowDown,
    RateLimitRule,
    SlowDownConfig,
)

__all__ = [
    "Admission",
    "FixedWindowRateLimiter",
    "OriginRegionFilter",
    "ProgressiveSlowDown",
    "RateLimitRule",
    "RequestGate",
    "ROUTE_APPEND",
    "ROUTE_LIST",
    "ROUTE_QUERY",
    "SlowDownConfig",
    "get_client_ip",
    "resolve_region",
]
