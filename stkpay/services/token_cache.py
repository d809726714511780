"""
Token Cache
Holds the Daraja bearer token and refreshes it at most once at a time.
"""

import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional, Tuple

from stkpay.errors import UpstreamAuthError
from stkpay.models import AccessToken
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SAFETY_MARGIN = 60


class TokenCache:
    """
    Single cached access token with single-flight refresh.

    ``fetch`` performs the credential exchange and returns
    ``(token_value, expires_in_seconds)``. While one caller is refreshing,
    every other caller waits for that same refresh and receives its token
    or its UpstreamAuthError. Failed refreshes are not cached.
    """

    def __init__(
            self,
            fetch: Callable[[], Tuple[str, int]],
            clock: Callable[[], float] = time.time,
            safety_margin: int = DEFAULT_SAFETY_MARGIN
    ):
        self._fetch = fetch
        self._clock = clock
        self.safety_margin = safety_margin

        self._lock = threading.Lock()
        self._token: Optional[AccessToken] = None
        self._inflight: Optional[Future] = None

        self.refresh_count = 0

    def get_token(self) -> AccessToken:
        with self._lock:
            token = self._token
            if token and token.is_fresh(self._clock(), self.safety_margin):
                return token

            future = self._inflight
            leader = future is None
            if leader:
                future = Future()
                self._inflight = future

        if not leader:
            return future.result()

        try:
            token = self._refresh()
        except BaseException as exc:
            with self._lock:
                self._inflight = None
            future.set_exception(exc)
            raise

        with self._lock:
            self._token = token
            self._inflight = None
        future.set_result(token)
        return token

    def invalidate(self) -> None:
        """Forget the cached token; the next get_token() refreshes."""
        with self._lock:
            self._token = None

    def _refresh(self) -> AccessToken:
        try:
            value, expires_in = self._fetch()
            lifetime = int(expires_in)
        except UpstreamAuthError as e:
            logger.error(f'Token refresh failed: {str(e)}')
            raise
        except Exception as e:
            logger.error(f'Token refresh failed: {str(e)}', exc_info=True)
            raise UpstreamAuthError(f'Token refresh failed: {str(e)}') from e

        self.refresh_count += 1
        expires_at = self._clock() + lifetime - self.safety_margin
        return AccessToken(value=value, expires_at=expires_at)
