"""In-memory sliding-window rate limiting for the HTTP surface.

State is per process; a multi-worker deployment needs a shared store instead.
`api_limiter` guards everything under `/api`. `auth_limiter` and
`password_reset_limiter` are exported for the login and password-reset routes
of the main backend, which mount them with `rate_limit_dependency`.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import HTTPException, Request, Response, status

from prodmgr.core.config import settings
from prodmgr.core.logging import get_logger

logger = get_logger(__name__)

SWEEP_EVERY = 1000


@dataclass(frozen=True)
class RateLimitState:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int  # seconds until the oldest counted hit leaves the window


class SlidingWindowRateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        message: str,
        *,
        name: str = "api",
        clock: Callable[[], float] = time.monotonic,
        sweep_every: int = SWEEP_EVERY,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.name = name
        self.sweep_every = sweep_every
        self._clock = clock
        self._history: dict[str, list[float]] = {}
        self._hits_since_sweep = 0
        self._last_sweep: float | None = None
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitState:
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            self._hits_since_sweep += 1
            if self._last_sweep is None:
                self._last_sweep = now
            if self._hits_since_sweep >= self.sweep_every or now - self._last_sweep >= self.window_seconds:
                self._sweep(now, cutoff)
            history = [t for t in self._history.get(key, []) if t > cutoff]
            allowed = len(history) < self.max_requests
            if allowed:
                history.append(now)
            if history:
                self._history[key] = history
            else:
                self._history.pop(key, None)
            oldest = history[0] if history else now
        reset_after = max(0, math.ceil(oldest + self.window_seconds - now))
        return RateLimitState(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - len(history)),
            reset_after=reset_after,
        )

    def _sweep(self, now: float, cutoff: float) -> None:
        # Caller holds the lock. Histories are append-ordered, so the last entry is the newest.
        expired = [key for key, history in self._history.items() if not history or history[-1] <= cutoff]
        for key in expired:
            del self._history[key]
        self._hits_since_sweep = 0
        self._last_sweep = now
        if expired:
            logger.debug("rate_limit.sweep limiter=%s evicted=%s tracked=%s", self.name, len(expired), len(self._history))

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._history)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._hits_since_sweep = 0
            self._last_sweep = None


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit_dependency(limiter: SlidingWindowRateLimiter) -> Callable[[Request, Response], None]:
    def enforce(request: Request, response: Response) -> None:
        key = _client_key(request)
        state = limiter.hit(key)
        headers = {
            "RateLimit-Limit": str(state.limit),
            "RateLimit-Remaining": str(state.remaining),
            "RateLimit-Reset": str(state.reset_after),
        }
        if not state.allowed:
            logger.warning("rate_limit.exceeded limiter=%s client=%s", limiter.name, key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={"success": False, "error": limiter.message, "status": 429},
                headers={**headers, "Retry-After": str(state.reset_after)},
            )
        response.headers.update(headers)

    return enforce


auth_limiter = SlidingWindowRateLimiter(
    settings.auth_rate_limit_max,
    settings.auth_rate_limit_window_seconds,
    "Too many authentication attempts from this IP. Please try again in 15 minutes.",
    name="auth",
)

password_reset_limiter = SlidingWindowRateLimiter(
    settings.password_reset_rate_limit_max,
    settings.password_reset_rate_limit_window_seconds,
    "Too many password reset requests from this IP. Please try again in 1 hour.",
    name="password_reset",
)

api_limiter = SlidingWindowRateLimiter(
    settings.api_rate_limit_max,
    settings.api_rate_limit_window_seconds,
    "Too many requests from this IP. Please slow down.",
    name="api",
)
