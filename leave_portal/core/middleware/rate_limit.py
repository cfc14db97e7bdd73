"""
Per-caller rate limiting.

Two in-memory policies keyed by (route, caller address):

* ``FixedWindowRateLimiter`` - hard cap of N requests per window W.
* ``ProgressiveSlowDown`` - after a burst threshold, each further request
  in a shorter window is delayed a little longer, up to a maximum.

Both count every request they see, admitted or rejected.
"""

import logging
import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from threading import Lock

from leave_portal.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateLimitRule:
    """Hard quota for one route."""

    max_requests: int
    window_seconds: float


@dataclass(frozen=True)
class SlowDownConfig:
    """Progressive delay policy."""

    window_seconds: float = 60.0
    delay_after: int = 10
    delay_step_seconds: float = 0.5
    max_delay_seconds: float = 5.0

    @property
    def enabled(self) -> bool:
        return self.delay_step_seconds > 0 and self.max_delay_seconds > 0


@dataclass
class WindowState:
    """Counter for one (route, caller) window."""

    started_at: float
    count: int = 0


@dataclass(frozen=True)
class RateLimitDecision:
    """Quota state after an admitted request."""

    limit: int
    remaining: int
    reset_after: int


class _WindowCounter:
    """Shared bookkeeping for fixed windows keyed by (route, identity)."""

    def __init__(self, clock: Clock, cleanup_interval: float) -> None:
        self._clock = clock
        self._states: dict[tuple[str, str], WindowState] = {}
        self._lock = Lock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = clock()

    def _window_for(self, route: str) -> float:
        """Window length that applies to ``route``."""
        raise NotImplementedError

    def _count(self, key: tuple[str, str]) -> WindowState:
        """Increment and return the state for ``key``. Caller holds the lock."""
        now = self._clock()
        self._cleanup_expired(now)
        state = self._states.get(key)
        if state is None or now - state.started_at >= self._window_for(key[0]):
            state = WindowState(started_at=now)
            self._states[key] = state
        state.count += 1
        return state

    def _cleanup_expired(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        # Each key expires by its own route's window.
        expired = [
            key for key, state in self._states.items()
            if now - state.started_at >= self._window_for(key[0])
        ]
        for key in expired:
            del self._states[key]

    def __len__(self) -> int:
        return len(self._states)


class FixedWindowRateLimiter(_WindowCounter):
    """
    Fixed-window limiter with one rule per route.

    A caller's window opens on its first request and lasts
    ``window_seconds``; the (N+1)-th request inside it is rejected. Routes
    without a rule are not limited.
    """

    def __init__(
        self,
        rules: Mapping[str, RateLimitRule],
        clock: Clock = time.monotonic,
        cleanup_interval: float = 300.0,
    ) -> None:
        super().__init__(clock, cleanup_interval)
        self.rules = dict(rules)

    def _window_for(self, route: str) -> float:
        return self.rules[route].window_seconds

    def hit(self, route: str, identity: str) -> RateLimitDecision | None:
        """
        Record a request and check it against the route's quota.

        Returns:
            The quota state, or None when the route has no rule.

        Raises:
            RateLimitedError: If the quota for the current window is spent.
        """
        rule = self.rules.get(route)
        if rule is None:
            return None

        with self._lock:
            state = self._count((route, identity))
            elapsed = self._clock() - state.started_at
            count = state.count

        reset_after = max(1, math.ceil(rule.window_seconds - elapsed))
        if count > rule.max_requests:
            logger.warning(f"Rate limit exceeded on '{route}' for IP: {identity}")
            raise RateLimitedError(
                f"{count} requests in window on '{route}'",
                retry_after=reset_after,
            )
        return RateLimitDecision(
            limit=rule.max_requests,
            remaining=rule.max_requests - count,
            reset_after=reset_after,
        )


class ProgressiveSlowDown(_WindowCounter):
    """
    Escalating delay after a burst.

    Within a window of ``window_seconds``, the first ``delay_after``
    requests pass immediately; request number ``delay_after + k`` is delayed
    by ``k * delay_step_seconds``, never more than ``max_delay_seconds``.
    """

    def __init__(
        self,
        config: SlowDownConfig,
        clock: Clock = time.monotonic,
        cleanup_interval: float = 300.0,
    ) -> None:
        super().__init__(clock, cleanup_interval)
        self.config = config

    def _window_for(self, route: str) -> float:
        return self.config.window_seconds

    def hit(self, route: str, identity: str) -> float:
        """Record a request and return the delay to apply, in seconds."""
        if not self.config.enabled:
            return 0.0

        with self._lock:
            count = self._count((route, identity)).count

        excess = count - self.config.delay_after
        if excess <= 0:
            return 0.0
        delay = min(excess * self.config.delay_step_seconds, self.config.max_delay_seconds)
        logger.info(f"Slowing down '{route}' for IP: {identity} by {delay:.2f}s")
        return delay
