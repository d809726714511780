"""
Webhook Service
Receives Daraja STK callbacks and records their outcome for polling clients
"""

import threading
from typing import Any, Dict, Optional

from stkpay.errors import MalformedCallback
from stkpay.models import OutcomeRecord, describe_code
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)


class WebhookService:
    """Service for handling STK Push callbacks"""

    def __init__(self, parser, store):
        self.parser = parser
        self.store = store
        self._lock = threading.Lock()
        self._counters = {'received': 0, 'recorded': 0, 'malformed': 0}

    def receive(self, payload: Any) -> Optional[OutcomeRecord]:
        """
        Parse and store one callback delivery

        Args:
            payload: Decoded callback body (or raw JSON text)

        Returns:
            The recorded outcome, or None when the payload was malformed.
            Malformed payloads are logged and counted, never raised: the
            caller must still acknowledge the delivery.
        """
        self._count('received')

        try:
            record = self.parser.parse(payload)
        except MalformedCallback as e:
            self._count('malformed')
            logger.warning(f'Discarding malformed STK callback: {e.message}')
            return None

        self.store.put(record.correlation_id, record)
        self._count('recorded')

        if record.succeeded:
            logger.info(
                f'STK Push {record.correlation_id} paid: receipt {record.receipt_number}, '
                f'amount {record.amount}'
            )
        else:
            logger.info(
                f'STK Push {record.correlation_id} failed with code {record.result_code}: '
                f'{record.result_description or describe_code(record.result_code)}'
            )

        return record

    def statistics(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def _count(self, name: str) -> None:
        with self._lock:
            self._counters[name] += 1
