# relay/middleware/rate_limiter.py
# Rate limiting middleware: in-memory fixed window counter per client key.
# Fixed windows allow up to 2x the limit across a window boundary; that burst
# is accepted behaviour, not a defect.

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from relay.middleware.error_handler import RateExceeded

logger = logging.getLogger(__name__)

KeyGenerator = Callable[[Request], str]
Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class WindowState:
    count: int
    window_start: float  # ms, in the limiter's clock


class FixedWindowCounter:
    """
    Fixed window rate limiter.

    State only shrinks through passive eviction on later hits; a client that
    goes quiet stays tracked until someone else's request sweeps it out.
    """

    def __init__(self, window_ms: int = 15000, limit: int = 10, clock: Optional[Clock] = None):
        self.window_ms = window_ms
        self.limit = limit
        self.clock = clock or monotonic_ms
        self._clients: Dict[str, WindowState] = {}

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, key: str) -> bool:
        return key in self._clients

    def cleanup_old_entries(self, now: Optional[float] = None) -> None:
        """Forget clients whose window started more than window_ms ago."""
        now = self.clock() if now is None else now
        # Full scan on every hit: O(tracked clients), accepted for a single
        # relay process in exchange for having no background sweeper.
        expired = [key for key, state in self._clients.items() if now - state.window_start > self.window_ms]
        for key in expired:
            del self._clients[key]

    def hit(self, key: str) -> Tuple[bool, int]:
        """
        Record one request for `key`.
        Returns (is_allowed, remaining_requests).
        """
        now = self.clock()
        self.cleanup_old_entries(now)

        state = self._clients.get(key)
        if state is None:
            state = self._clients[key] = WindowState(count=1, window_start=now)
        elif now - state.window_start > self.window_ms:
            # Window rolled over
            state.count = 1
            state.window_start = now
        else:
            state.count += 1

        remaining = max(0, self.limit - state.count)
        return state.count <= self.limit, remaining


def default_key_generator(request: Request) -> str:
    """Client address (already proxy-resolved), then X-Forwarded-For, then 'unknown'."""
    if request.client and request.client.host:
        return request.client.host

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Last hop is the one our proxy appended; earlier entries are client supplied
        return forwarded.split(",")[-1].strip()

    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware gating every request before routing.
    X-RateLimit-* headers are attached to allowed and rejected responses alike.
    """

    def __init__(
        self,
        app,
        limiter: FixedWindowCounter,
        message: str = "Too many requests",
        key_generator: Optional[KeyGenerator] = None,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.message = message
        self.key_generator = key_generator or default_key_generator

    async def dispatch(self, request: Request, call_next):
        client_key = self.key_generator(request)
        is_allowed, remaining = self.limiter.hit(client_key)
        headers = {
            "X-RateLimit-Limit": str(self.limiter.limit),
            "X-RateLimit-Remaining": str(remaining),
        }

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_key} on {request.url.path}")
            return RateExceeded(error=self.message).to_response(headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
