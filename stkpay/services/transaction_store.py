"""
Transaction Store
Correlation id -> OutcomeRecord, kept for a fixed retention horizon.

Retention policy: an entry expires ``retention_seconds`` after the FIRST
put for its correlation id. A later put for the same id (duplicate or
corrected callback delivery) replaces the record but keeps the original
expiry.
"""

import json
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from stkpay.models import OutcomeRecord
from stkpay.schemas.payment_schema import OutcomeRecordSchema
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RETENTION_SECONDS = 600


class TransactionStore(ABC):
    """Where callback outcomes wait for the polling client."""

    def __init__(self, retention_seconds: int = DEFAULT_RETENTION_SECONDS):
        self.retention_seconds = retention_seconds

    @abstractmethod
    def put(self, correlation_id: str, record: OutcomeRecord) -> None:
        pass

    @abstractmethod
    def get(self, correlation_id: str) -> Optional[OutcomeRecord]:
        pass

    def sweep(self) -> int:
        """Remove expired entries; returns how many were removed."""
        return 0

    def size(self) -> Optional[int]:
        """Number of entries held, or None when the backend does not count them."""
        return None


class InMemoryTransactionStore(TransactionStore):
    """Process-local store; entries are evicted lazily on get and by sweep()."""

    def __init__(
            self,
            retention_seconds: int = DEFAULT_RETENTION_SECONDS,
            clock: Callable[[], float] = time.time
    ):
        super().__init__(retention_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[OutcomeRecord, float]] = {}

    def put(self, correlation_id: str, record: OutcomeRecord) -> None:
        now = self._clock()
        with self._lock:
            existing = self._entries.get(correlation_id)
            if existing is not None and existing[1] > now:
                expires_at = existing[1]
            else:
                expires_at = now + self.retention_seconds
            self._entries[correlation_id] = (record, expires_at)

    def get(self, correlation_id: str) -> Optional[OutcomeRecord]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(correlation_id)
            if entry is None:
                return None
            record, expires_at = entry
            if expires_at <= now:
                self._entries.pop(correlation_id, None)
                return None
            return record

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
            for key in expired:
                self._entries.pop(key, None)
        return len(expired)

    def size(self) -> Optional[int]:
        return len(self)

    def __len__(self):
        with self._lock:
            return len(self._entries)


class RedisTransactionStore(TransactionStore):
    """Store shared by every process pointing at the same Redis; Redis TTLs do the reaping."""

    def __init__(
            self,
            redis_client,
            retention_seconds: int = DEFAULT_RETENTION_SECONDS,
            key_prefix: str = 'stk_outcome'
    ):
        super().__init__(retention_seconds)
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._schema = OutcomeRecordSchema()

    def _key(self, correlation_id: str) -> str:
        return f'{self.key_prefix}:{correlation_id}'

    def put(self, correlation_id: str, record: OutcomeRecord) -> None:
        key = self._key(correlation_id)
        data = json.dumps(self._schema.dump(record))

        # First arrival sets the TTL; later writes keep it
        if not self.redis.set(key, data, ex=self.retention_seconds, nx=True):
            if not self.redis.set(key, data, xx=True, keepttl=True):
                # Expired between the two calls
                self.redis.set(key, data, ex=self.retention_seconds)

    def get(self, correlation_id: str) -> Optional[OutcomeRecord]:
        cached = self.redis.get(self._key(correlation_id))
        if cached is None:
            return None
        return self._schema.load(json.loads(cached))
