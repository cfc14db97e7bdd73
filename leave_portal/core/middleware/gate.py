"""
Request admission gate.

Runs before any payload parsing. Policies apply in a fixed order:

1. origin / region filter (403)
2. fixed-window rate limit (429)
3. progressive slow-down (delay, never reject)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leave_portal.core.middleware.geo import OriginRegionFilter
from leave_portal.core.middleware.rate_limit import (
    Clock,
    FixedWindowRateLimiter,
    ProgressiveSlowDown,
    RateLimitRule,
    SlowDownConfig,
)
from leave_portal.leave.models import RequestContext

if TYPE_CHECKING:
    from leave_portal.core.config import LeaveSettings

logger = logging.getLogger(__name__)

ROUTE_QUERY = "query"
ROUTE_APPEND = "append"
ROUTE_LIST = "list"


@dataclass(frozen=True)
class Admission:
    """Outcome of an admitted request, rendered as RateLimit-* headers."""

    limit: int | None = None
    remaining: int | None = None
    reset_after: int | None = None
    delay: float = 0.0

    def headers(self) -> dict[str, str]:
        if self.limit is None:
            return {}
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(max(0, self.remaining or 0)),
            "RateLimit-Reset": str(self.reset_after or 0),
        }


class RequestGate:
    """Composable admission control shared by all gated routes."""

    def __init__(
        self,
        origin_filter: OriginRegionFilter | None = None,
        rate_limiter: FixedWindowRateLimiter | None = None,
        slow_down: ProgressiveSlowDown | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        # Counters define __len__, so test against None rather than truthiness.
        if origin_filter is None:
            origin_filter = OriginRegionFilter()
        if rate_limiter is None:
            rate_limiter = FixedWindowRateLimiter({})
        if slow_down is None:
            slow_down = ProgressiveSlowDown(SlowDownConfig(delay_step_seconds=0.0))
        self.origin_filter = origin_filter
        self.rate_limiter = rate_limiter
        self.slow_down = slow_down
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: "LeaveSettings",
        clock: Clock = time.monotonic,
    ) -> "RequestGate":
        """Build the gate from the configured policy table."""
        rules = {
            ROUTE_QUERY: RateLimitRule(
                max_requests=settings.query_rate_limit,
                window_seconds=settings.query_rate_window_seconds,
            ),
            ROUTE_APPEND: RateLimitRule(
                max_requests=settings.append_rate_limit,
                window_seconds=settings.append_rate_window_seconds,
            ),
        }
        slow_down = SlowDownConfig(
            window_seconds=settings.slowdown_window_seconds,
            delay_after=settings.slowdown_delay_after,
            delay_step_seconds=settings.slowdown_delay_step_seconds,
            max_delay_seconds=settings.slowdown_max_delay_seconds,
        )
        return cls(
            origin_filter=OriginRegionFilter(
                allowed_origins=settings.allowed_origins,
                allowed_regions=settings.allowed_regions,
                allow_unresolved=settings.geo_allow_unresolved,
            ),
            rate_limiter=FixedWindowRateLimiter(rules, clock=clock),
            slow_down=ProgressiveSlowDown(slow_down, clock=clock),
        )

    async def admit(self, ctx: RequestContext) -> Admission:
        """
        Admit the request or short-circuit it.

        Raises:
            AccessDeniedError: If the origin or region is not allowed.
            RateLimitedError: If the caller's quota for the route is spent.
        """
        self.origin_filter.check(ctx)
        decision = self.rate_limiter.hit(ctx.route, ctx.client_address)
        delay = self.slow_down.hit(ctx.route, ctx.client_address)
        if delay > 0:
            await self._sleep(delay)

        if decision is None:
            return Admission(delay=delay)
        return Admission(
            limit=decision.limit,
            remaining=decision.remaining,
            reset_after=decision.reset_after,
            delay=delay,
        )
