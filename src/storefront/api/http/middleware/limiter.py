"""Per-client request quotas for the HTTP layer."""

from __future__ import annotations

import asyncio
import math
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import HTTPException, Request, Response
from loguru import logger

from src.storefront.runtime.context import get_config

SWEEP_INTERVAL_SECONDS = 60.0


@dataclass(frozen=True)
class Quota:
    requests: int
    window_ms: int
    per_endpoint: bool = True
    per_method: bool = True

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000


RateLimiter = Callable[[Request, Response], Awaitable[None]]
LimiterFactory = Callable[[Quota], RateLimiter]


def client_key(request: Request, quota: Quota) -> str:
    """Identify the caller: the authenticated user if known, else the peer IP."""
    uid = getattr(request.state, "uid", None)
    if uid is not None:
        parts = [f"user:{uid}"]
    else:
        parts = [f"ip:{request.client.host if request.client else 'anonymous'}"]

    if quota.per_method:
        parts.append(request.method)
    if quota.per_endpoint:
        route = request.scope.get("route")
        path = getattr(route, "path", None) or request.url.path
        parts.append(path.rstrip("/"))
    return ":".join(parts)


def _expire(window: deque[float], horizon: float) -> None:
    while window and window[0] <= horizon:
        window.popleft()


class SlidingWindowLimiter:
    """Counts hits per client inside a rolling window, in process memory.

    Only suitable for a single worker; every process keeps its own counts.
    """

    def __init__(self, quota: Quota, clock: Callable[[], float] = time.monotonic) -> None:
        self.quota = quota
        self._clock = clock
        self._windows: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()
        self._next_sweep = clock() + SWEEP_INTERVAL_SECONDS

    async def __call__(self, request: Request, response: Response) -> None:
        await self.hit(client_key(request, self.quota))

    @property
    def tracked_keys(self) -> int:
        return len(self._windows)

    async def hit(self, key: str) -> None:
        """Record one request for ``key``.

        Raises:
            HTTPException: 429 with ``Retry-After`` once the quota is spent
        """
        now = self._clock()
        horizon = now - self.quota.window_seconds
        async with self._lock:
            if now >= self._next_sweep:
                self._sweep(horizon)
                self._next_sweep = now + SWEEP_INTERVAL_SECONDS

            window = self._windows.setdefault(key, deque())
            _expire(window, horizon)
            if len(window) >= self.quota.requests:
                retry_after = max(1, math.ceil(window[0] - horizon))
                logger.bind(key=key, retry_after=retry_after).warning("Rate limit exceeded")
                raise HTTPException(
                    status_code=429,
                    detail="Too Many Requests",
                    headers={"Retry-After": str(retry_after)},
                )
            window.append(now)

    def _sweep(self, horizon: float) -> None:
        for key in list(self._windows):
            window = self._windows[key]
            _expire(window, horizon)
            if not window:
                del self._windows[key]

    async def reset(self) -> None:
        async with self._lock:
            self._windows.clear()


_factory: LimiterFactory | None = None
_limiters: dict[Quota, RateLimiter] = {}


def configure_rate_limiter(factory: LimiterFactory | None = None) -> None:
    """Select the limiter implementation and forget previously built limiters."""
    global _factory

    _limiters.clear()
    _factory = factory or SlidingWindowLimiter
    logger.info("Rate limiter configured: {}", getattr(_factory, "__name__", _factory))


def get_rate_limiter(requests: int | None = None, window_ms: int | None = None) -> RateLimiter:
    """Return the shared limiter for a quota, building it on first use."""
    if _factory is None:
        configure_rate_limiter()

    settings = get_config().rate_limiter
    quota = Quota(
        requests=requests if requests is not None else settings.requests,
        window_ms=window_ms if window_ms is not None else settings.window_ms,
        per_endpoint=settings.per_endpoint,
        per_method=settings.per_method,
    )
    limiter = _limiters.get(quota)
    if limiter is None:
        limiter = _limiters[quota] = _factory(quota)
    return limiter


def rate_limit(requests: int | None = None, window_ms: int | None = None) -> RateLimiter:
    """Dependency enforcing a request quota.

    Omitted limits come from the ``rate_limiter`` configuration section,
    read when the request arrives.
    """

    async def dependency(request: Request, response: Response) -> None:
        if not get_config().rate_limiter.enabled:
            return
        await get_rate_limiter(requests, window_ms)(request, response)

    return dependency


async def close_rate_limiter() -> None:
    """Drop every limiter and its counters."""
    global _factory

    limiters = list(_limiters.values())
    _limiters.clear()
    _factory = None
    for limiter in limiters:
        if isinstance(limiter, SlidingWindowLimiter):
            await limiter.reset()
    logger.info("Closed {} rate limiters", len(limiters))
