"""Fixed-window request caps on the sensitive endpoints.

Each (path, client) pair gets ``max_requests`` per window. The window
opens with the first request and closes ``window_seconds`` later; further
requests inside it are answered with 429 and a ``Retry-After`` header.
Counters live in process memory, so every API process counts on its own.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

RATE_LIMITED_CODE = "RATE_LIMITED"
RATE_LIMITED_DETAIL = "Rate limit exceeded. Please try again later."

# Expired windows are swept once this many counters exist
PRUNE_THRESHOLD = 10_000


@dataclass(frozen=True)
class RateLimitRule:
    max_requests: int
    window_seconds: float


DEFAULT_RULES: dict[str, RateLimitRule] = {
    "/api/auth/login": RateLimitRule(max_requests=5, window_seconds=15 * 60),
    "/api/auth/register": RateLimitRule(max_requests=3, window_seconds=60 * 60),
    "/api/auth/refresh": RateLimitRule(max_requests=10, window_seconds=15 * 60),
    "/api/database/reset": RateLimitRule(max_requests=10, window_seconds=60),
}


@dataclass
class _Window:
    opened_at: float
    length: float
    count: int = 1

    def expired(self, now: float) -> bool:
        return now - self.opened_at >= self.length


class FixedWindowCounter:
    """
    Counts hits per key in windows that start with a key's first hit.

    ``hit`` returns 0 when the request may pass, otherwise the seconds
    until the key's window closes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[tuple[str, str], _Window] = {}

    def __len__(self) -> int:
        return len(self._windows)

    def hit(self, key: tuple[str, str], rule: RateLimitRule) -> float:
        now = self._clock()
        window = self._windows.get(key)
        if window is None or window.expired(now):
            if len(self._windows) >= PRUNE_THRESHOLD:
                self._prune(now)
            self._windows[key] = _Window(opened_at=now, length=rule.window_seconds)
            return 0.0

        if window.count >= rule.max_requests:
            return window.length - (now - window.opened_at)

        window.count += 1
        return 0.0

    def _prune(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if window.expired(now)]
        for key in expired:
            del self._windows[key]

    def clear(self) -> None:
        self._windows.clear()


def client_id(request: Request) -> str:
    """First ``X-Forwarded-For`` entry, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",", 1)[0].strip()
    if first:
        return first
    return request.client.host if request.client else "unknown"


def _for_log(value: str) -> str:
    return value.replace("\n", "_").replace("\r", "_").replace("\t", "_").strip()


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        rules: Mapping[str, RateLimitRule] | None = None,
        counter: FixedWindowCounter | None = None,
    ):
        super().__init__(app)
        rules = DEFAULT_RULES if rules is None else rules
        self.rules = {path.lower(): rule for path, rule in rules.items()}
        self.counter = counter or FixedWindowCounter()

    async def dispatch(self, request: Request, call_next):
        path = request.url.path.lower().rstrip("/")
        rule = self.rules.get(path)
        if rule is None:
            return await call_next(request)

        client = client_id(request)
        retry_after = self.counter.hit((path, client), rule)
        if retry_after <= 0:
            return await call_next(request)

        logger.warning(
            "Rate limit exceeded for %s from %s",
            _for_log(path),
            _for_log(client),
        )
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": RATE_LIMITED_DETAIL, "code": RATE_LIMITED_CODE},
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
        )
