"""
Push Initiator
Validates an STK Push request and sends it to Daraja.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from stkpay.errors import DarajaAPIError, InitiationRejected, UpstreamAuthError, ValidationError
from stkpay.utils.logger import get_logger
from stkpay.utils.validators import (
    ACCOUNT_REFERENCE_MAX,
    TRANSACTION_DESC_MAX,
    sanitize_phone_number,
    sanitize_text,
    to_whole_amount,
    validate_amount,
    validate_phone_number,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PushReceipt:
    correlation_id: str
    peer_correlation_id: Optional[str] = None
    customer_message: Optional[str] = None


class PushInitiator:
    """Lipa na M-Pesa Online (STK Push) initiation."""

    def __init__(
            self,
            daraja,
            token_cache,
            callback_url: str,
            party_b: Optional[str] = None,
            transaction_type: str = 'CustomerBuyGoodsOnline',
            default_reference: str = 'Payment',
            default_description: str = 'Payment',
            now: Callable[[], datetime] = datetime.now
    ):
        self.daraja = daraja
        self.token_cache = token_cache
        self.callback_url = callback_url
        self.party_b = party_b or daraja.shortcode
        self.transaction_type = transaction_type
        self.default_reference = default_reference
        self.default_description = default_description
        self._now = now

    def initiate(
            self,
            phone: Any,
            amount: Any,
            reference: Optional[str] = None,
            description: Optional[str] = None
    ) -> PushReceipt:
        """
        Send an STK Push prompt to the payer's phone.

        Raises:
            ValidationError: bad phone or amount (no network call is made)
            InitiationRejected: Daraja declined the request
            UpstreamAuthError: no usable access token
            UpstreamUnavailable / UpstreamTimeout: transport failure
        """
        is_valid, error = validate_phone_number(phone)
        if not is_valid:
            raise ValidationError(error)

        is_valid, error = validate_amount(amount)
        if not is_valid:
            raise ValidationError(error)

        formatted_phone = sanitize_phone_number(phone)
        whole_amount = to_whole_amount(amount)

        body = self.build_request(
            phone=formatted_phone,
            amount=whole_amount,
            reference=sanitize_text(reference, ACCOUNT_REFERENCE_MAX, self.default_reference),
            description=sanitize_text(description, TRANSACTION_DESC_MAX, self.default_description),
        )

        token = self.token_cache.get_token()
        try:
            resp = self.daraja.stk_push(body, token.value)
        except UpstreamAuthError:
            self.token_cache.invalidate()
            raise
        except DarajaAPIError as e:
            logger.warning(f'STK Push rejected by Daraja ({e.error_code}): {e.message}')
            raise InitiationRejected(e.message) from e

        if str(resp.get('ResponseCode')) != '0':
            reason = resp.get('ResponseDescription') or 'STK Push failed'
            logger.warning(f'STK Push not accepted: {reason}')
            raise InitiationRejected(reason)

        correlation_id = resp.get('CheckoutRequestID')
        if not correlation_id:
            raise InitiationRejected('STK Push accepted without a CheckoutRequestID')

        logger.info(f'STK Push accepted: {correlation_id} ({whole_amount} KES to {formatted_phone[:6]}***)')

        return PushReceipt(
            correlation_id=correlation_id,
            peer_correlation_id=resp.get('MerchantRequestID'),
            customer_message=resp.get('CustomerMessage') or 'STK Push sent successfully',
        )

    def build_request(self, phone: str, amount: int, reference: str, description: str) -> dict:
        """processrequest body for an already validated and sanitised request"""
        timestamp, password = self.daraja.generate_password(self._now())
        return {
            'BusinessShortCode': self.daraja.shortcode,
            'Password':          password,
            'Timestamp':         timestamp,
            'TransactionType':   self.transaction_type,
            'Amount':            str(amount),
            'PartyA':            phone,
            'PartyB':            self.party_b,
            'PhoneNumber':       phone,
            'CallBackURL':       self.callback_url,
            'AccountReference':  reference,
            'TransactionDesc':   description,
        }
