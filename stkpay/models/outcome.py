from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float

    def is_fresh(self, now: float, margin: float = 0.0) -> bool:
        return self.expires_at - now > margin


@dataclass
class RateWindow:
    client_key: str
    count: int
    window_reset_at: float


@dataclass(frozen=True)
class OutcomeRecord:
    """Final result of one STK Push, as delivered by the Daraja callback."""

    correlation_id: str
    result_code: int
    result_description: str = ''
    peer_correlation_id: Optional[str] = None
    receipt_number: Optional[str] = None
    amount: Optional[Union[int, float]] = None
    phone: Optional[str] = None
    transaction_timestamp: Optional[str] = None
    recorded_at: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.result_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'correlation_id': self.correlation_id,
            'peer_correlation_id': self.peer_correlation_id,
            'result_code': self.result_code,
            'result_description': self.result_description,
            'succeeded': self.succeeded,
            'receipt_number': self.receipt_number,
            'amount': self.amount,
            'phone': self.phone,
            'transaction_timestamp': self.transaction_timestamp,
            'recorded_at': self.recorded_at,
        }
