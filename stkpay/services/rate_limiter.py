"""
Rate Limiter
Per-client fixed-window guard for the STK Push initiation endpoint.

Both implementations are best-effort guards. InMemoryRateLimiter only
sees the requests served by its own process, so N processes admit up to
N times the limit. RedisRateLimiter shares counters across processes
through Redis but reads and increments without a transaction, so bursts
racing on the same key may slip a request or two past the limit.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict

from redis.exceptions import RedisError

from stkpay.models import RateWindow
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_SECONDS = 60


class RateLimiter(ABC):
    """Admission check keyed by client (IP address or similar)."""

    def __init__(self, max_requests: int = DEFAULT_MAX_REQUESTS, window_seconds: int = DEFAULT_WINDOW_SECONDS):
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @abstractmethod
    def allow(self, client_key: str) -> bool:
        """Return True and count the request if the client is under its limit."""
        pass

    def sweep(self) -> int:
        """Drop state that can no longer affect a decision; returns entries removed."""
        return 0


class InMemoryRateLimiter(RateLimiter):
    """Fixed window per key, held in this process only."""

    def __init__(
            self,
            max_requests: int = DEFAULT_MAX_REQUESTS,
            window_seconds: int = DEFAULT_WINDOW_SECONDS,
            clock: Callable[[], float] = time.time
    ):
        super().__init__(max_requests, window_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, RateWindow] = {}

    def allow(self, client_key: str) -> bool:
        now = self._clock()
        with self._lock:
            window = self._windows.get(client_key)

            if window is None or now > window.window_reset_at:
                self._windows[client_key] = RateWindow(
                    client_key=client_key,
                    count=1,
                    window_reset_at=now + self.window_seconds
                )
                return True

            if window.count >= self.max_requests:
                return False

            window.count += 1
            return True

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [key for key, window in self._windows.items() if now > window.window_reset_at]
            for key in stale:
                self._windows.pop(key, None)
        return len(stale)

    def __len__(self):
        with self._lock:
            return len(self._windows)


class RedisRateLimiter(RateLimiter):
    """
    Counter per key and window bucket in Redis.

    Windows are aligned to multiples of ``window_seconds`` rather than
    starting at a key's first request; keys expire with their window.
    """

    def __init__(
            self,
            redis_client,
            max_requests: int = DEFAULT_MAX_REQUESTS,
            window_seconds: int = DEFAULT_WINDOW_SECONDS,
            key_prefix: str = 'rate_limit',
            clock: Callable[[], float] = time.time
    ):
        super().__init__(max_requests, window_seconds)
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._clock = clock

    def _key(self, client_key: str) -> str:
        current_window = int(self._clock() / self.window_seconds)
        return f'{self.key_prefix}:{client_key}:{current_window}'

    def allow(self, client_key: str) -> bool:
        key = self._key(client_key)

        try:
            count = self.redis.get(key)
            count = int(count) if count is not None else 0

            if count >= self.max_requests:
                return False

            pipe = self.redis.pipeline()
            pipe.incr(key)
            pipe.expire(key, self.window_seconds)
            pipe.execute()
        except RedisError as e:
            # If Redis fails, allow the request (fail open)
            logger.warning(f"Rate limit check failed: {str(e)}")

        return True
