import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from fastapi import Depends, Request, Response

from app.core.config import settings
from app.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADER = "X-Rate-Limit"
RATE_LIMIT_REMAINING_HEADER = "X-Rate-Limit-Remaining"
RATE_LIMIT_RESET_HEADER = "X-Rate-Limit-Reset"


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def headers(self) -> Dict[str, str]:
        return {
            RATE_LIMIT_HEADER: str(self.limit),
            RATE_LIMIT_REMAINING_HEADER: str(self.remaining),
            RATE_LIMIT_RESET_HEADER: datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat(),
        }


class RateLimiter:
    """Fixed-window request counter keyed by client identifier.

    Windows live in process memory, so limits are per worker. Expired
    windows are pruned whenever the table is touched.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.time):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # identifier -> [count, reset_at]
        self._windows: Dict[str, List[float]] = {}
        self._lock = asyncio.Lock()

    async def check(self, identifier: str) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            self._prune(now)

            entry = self._windows.get(identifier)
            if entry is None:
                entry = [0, now + self.window_seconds]
                self._windows[identifier] = entry

            allowed = entry[0] < self.max_requests
            if allowed:
                entry[0] += 1

            return RateLimitResult(
                allowed=allowed,
                limit=self.max_requests,
                remaining=max(0, self.max_requests - int(entry[0])),
                reset_at=entry[1],
            )

    def reset(self):
        self._windows.clear()

    def _prune(self, now: float):
        expired = [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]
        for k in expired:
            del self._windows[k]


# Identify the caller by the first forwarded hop, then the real-ip header, then the socket peer
def get_client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


# Singleton instance
_LIMITER: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    global _LIMITER
    if _LIMITER is None:
        _LIMITER = RateLimiter(settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)
    return _LIMITER


async def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> RateLimitResult:
    identifier = get_client_identifier(request)
    result = await limiter.check(identifier)
    # Error handlers read this back so failed requests still carry the headers
    request.state.rate_limit = result

    if not result.allowed:
        logger.warning(f"Rate limit exceeded for client {identifier}")
        raise RateLimitExceededError(
            details="Too many requests. Please try again later.",
            headers=result.headers(),
        )

    response.headers.update(result.headers())
    return result
