from enum import Enum
from typing import Any, Dict, Optional, Tuple


class PushStatus(str, Enum):
    PENDING = 'pending'
    SUCCESS = 'success'
    FAILED = 'failed'
    CANCELLED = 'cancelled'
    TIMEOUT = 'timeout'


# Daraja result code -> (status, message shown to the payer-facing client)
RESULT_CODES: Dict[int, Tuple[PushStatus, str]] = {
    0:    (PushStatus.SUCCESS,   'Payment completed successfully'),
    1:    (PushStatus.FAILED,    'Insufficient balance'),
    2:    (PushStatus.FAILED,    'Amount below minimum limit (KES 1)'),
    3:    (PushStatus.FAILED,    'Amount exceeds maximum transaction limit'),
    4:    (PushStatus.FAILED,    'Would exceed daily transfer limit'),
    8:    (PushStatus.FAILED,    'Would exceed maximum account balance'),
    17:   (PushStatus.FAILED,    'Duplicate transaction - wait 2 minutes'),
    1019: (PushStatus.FAILED,    'Transaction expired'),
    1025: (PushStatus.FAILED,    'Transaction limit exceeded'),
    1032: (PushStatus.CANCELLED, 'Transaction cancelled by user'),
    1037: (PushStatus.TIMEOUT,   'Transaction timed out. No response from user.'),
    2001: (PushStatus.FAILED,    'Wrong PIN entered'),
    2028: (PushStatus.FAILED,    'Invalid transaction type or PartyB'),
}


def parse_code(code: Any) -> Optional[int]:
    """Integer form of a result code ("1032", 1032, " 0 "); None when not numeric."""
    try:
        return int(str(code).strip())
    except (TypeError, ValueError):
        return None


def status_for_code(code: Any) -> PushStatus:
    """Map a raw result code to a PushStatus; unknown or garbled codes are pending."""
    entry = RESULT_CODES.get(parse_code(code))
    return entry[0] if entry else PushStatus.PENDING


def is_known_code(code: Any) -> bool:
    return parse_code(code) in RESULT_CODES


def describe_code(code: Any) -> str:
    entry = RESULT_CODES.get(parse_code(code))
    if entry:
        return entry[1]
    return f'Unknown result (code {code})'
