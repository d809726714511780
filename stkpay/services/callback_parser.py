"""
Callback Parser
Turns a raw Daraja STK Push callback into an OutcomeRecord.

Parsing is pure: no I/O and no shared state, so the same payload parsed
with the same ``received_at`` always yields an equal record.
"""

import json
import time
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from marshmallow import ValidationError as SchemaValidationError

from stkpay.errors import MalformedCallback
from stkpay.models import OutcomeRecord
from stkpay.schemas.webhook_schema import MPesaCallbackSchema

# CallbackMetadata item names we lift onto the record
RECEIPT_NUMBER = 'MpesaReceiptNumber'
AMOUNT = 'Amount'
TRANSACTION_DATE = 'TransactionDate'
PHONE_NUMBER = 'PhoneNumber'

_callback_schema = MPesaCallbackSchema()


def fold_metadata(metadata: Any) -> Dict[str, Any]:
    """
    Flatten ``CallbackMetadata`` ({"Item": [{"Name": n, "Value": v}, ...]})
    into {n: v}. Items without a string Name are skipped; items without
    a Value map to None.
    """
    if not isinstance(metadata, Mapping):
        return {}

    items = metadata.get('Item')
    if isinstance(items, Mapping):
        # A single item is occasionally sent bare instead of in a list
        items = [items]
    if not isinstance(items, list):
        return {}

    folded: Dict[str, Any] = {}
    for item in items:
        if isinstance(item, Mapping) and isinstance(item.get('Name'), str):
            folded[item['Name']] = item.get('Value')
    return folded


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _number(value: Any):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(str(value))
    except ValueError:
        return None
    return int(number) if number.is_integer() else number


class CallbackParser:
    """Decode the STK callback envelope (``Body.stkCallback``)."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def parse(self, raw_payload: Any, received_at: Optional[float] = None) -> OutcomeRecord:
        """
        Parse a callback payload.

        Args:
            raw_payload: decoded JSON (mapping), or the raw JSON text/bytes
            received_at: arrival time stamped on the record; defaults to now

        Raises:
            MalformedCallback: the envelope or a required field is missing
        """
        if isinstance(raw_payload, (bytes, str)):
            try:
                raw_payload = json.loads(raw_payload)
            except ValueError as e:
                raise MalformedCallback(f'Callback is not valid JSON: {str(e)}') from e

        if not isinstance(raw_payload, Mapping):
            raise MalformedCallback(f'Callback must be a JSON object, got {type(raw_payload).__name__}')

        try:
            envelope = _callback_schema.load(raw_payload)
        except SchemaValidationError as e:
            raise MalformedCallback(f'Invalid callback structure: {e.messages}') from e

        stk = envelope['Body']['stkCallback']
        result_code = stk['ResultCode']

        details: Dict[str, Any] = {}
        if result_code == 0:
            metadata = fold_metadata(stk.get('CallbackMetadata'))
            if metadata:
                details = {
                    'receipt_number': _text(metadata.get(RECEIPT_NUMBER)),
                    'amount': _number(metadata.get(AMOUNT)),
                    'transaction_timestamp': _text(metadata.get(TRANSACTION_DATE)),
                    'phone': _text(metadata.get(PHONE_NUMBER)),
                }

        return OutcomeRecord(
            correlation_id=stk['CheckoutRequestID'],
            peer_correlation_id=stk.get('MerchantRequestID'),
            result_code=result_code,
            result_description=stk.get('ResultDesc') or '',
            recorded_at=self._clock() if received_at is None else received_at,
            **details
        )
