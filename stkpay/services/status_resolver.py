"""
Status Resolver
Answers "what happened to STK Push X?" for polling clients.

The callback store is the source of truth: a stored outcome is returned
without touching the network. Only when nothing is stored yet is Daraja
queried directly, and the store is checked again afterwards because the
callback may have landed while the query was in flight.

Polling never fails hard: upstream, auth, transport and store read errors all
resolve to ``pending`` so the client simply polls again.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from redis.exceptions import RedisError

from stkpay.errors import DarajaAPIError, UpstreamAuthError, UpstreamUnavailable
from stkpay.models import (
    OutcomeRecord,
    PushStatus,
    describe_code,
    is_known_code,
    parse_code,
    status_for_code,
)
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)

PENDING_MESSAGE = 'Checking payment status...'
PROCESSING_MESSAGE = 'Transaction is still being processed'

# errorCode Daraja returns while the payer has not yet answered the prompt
STILL_PROCESSING_CODE = '500.001.1001'


@dataclass(frozen=True)
class Resolution:
    status: PushStatus
    message: str
    result_code: Optional[int] = None
    receipt_number: Optional[str] = None
    amount: Optional[Union[int, float]] = None
    phone: Optional[str] = None
    transaction_date: Optional[str] = None
    source: str = 'query'

    @classmethod
    def from_record(cls, record: OutcomeRecord) -> 'Resolution':
        return cls(
            status=status_for_code(record.result_code),
            message=record.result_description or describe_code(record.result_code),
            result_code=record.result_code,
            receipt_number=record.receipt_number,
            amount=record.amount,
            phone=record.phone,
            transaction_date=record.transaction_timestamp,
            source='callback',
        )

    @classmethod
    def pending(cls, message: str = PENDING_MESSAGE) -> 'Resolution':
        return cls(status=PushStatus.PENDING, message=message)


def _still_processing(error: DarajaAPIError) -> bool:
    if str(error.error_code or '') == STILL_PROCESSING_CODE:
        return True
    text = (error.message or '').lower()
    return 'being processed' in text or 'pending' in text


class StatusResolver:
    """Store-first status lookup with a Daraja STK query fallback."""

    def __init__(self, store, daraja, token_cache, now: Callable[[], datetime] = datetime.now):
        self.store = store
        self.daraja = daraja
        self.token_cache = token_cache
        self._now = now

    def lookup(self, correlation_id: str) -> Optional[OutcomeRecord]:
        """Stored callback outcome only; never touches the network."""
        return self.store.get(correlation_id)

    def resolve(self, correlation_id: str) -> Resolution:
        record = self._stored(correlation_id)
        if record is not None:
            return Resolution.from_record(record)

        resolution = self._query(correlation_id)

        # The callback may have arrived during the round-trip; freshest data wins
        latest = self._stored(correlation_id)
        if latest is not None:
            return Resolution.from_record(latest)

        return resolution

    def _stored(self, correlation_id: str) -> Optional[OutcomeRecord]:
        try:
            return self.store.get(correlation_id)
        except RedisError as e:
            logger.warning(f'Store read for {correlation_id} failed: {str(e)}')
            return None

    def _query(self, correlation_id: str) -> Resolution:
        try:
            token = self.token_cache.get_token()
            resp = self.daraja.stk_query(correlation_id, token.value, self._now())
        except DarajaAPIError as e:
            if _still_processing(e):
                return Resolution.pending(PROCESSING_MESSAGE)
            logger.warning(f'STK query for {correlation_id} returned Daraja error {e.error_code}: {e.message}')
            return Resolution.pending()
        except UpstreamAuthError as e:
            self.token_cache.invalidate()
            logger.warning(f'STK query for {correlation_id} could not authenticate: {e.message}')
            return Resolution.pending()
        except UpstreamUnavailable as e:
            logger.warning(f'STK query for {correlation_id} failed: {e.message}')
            return Resolution.pending()

        raw_code = resp.get('ResultCode')
        result_code = parse_code(raw_code)
        if result_code is None:
            return Resolution.pending(resp.get('ResultDesc') or PROCESSING_MESSAGE)

        if is_known_code(result_code):
            message = describe_code(result_code)
        else:
            message = resp.get('ResultDesc') or PENDING_MESSAGE

        return Resolution(
            status=status_for_code(result_code),
            message=message,
            result_code=result_code,
        )
