"""
Custom Validators
Validation and sanitising of STK Push inputs
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

MIN_AMOUNT = 1
MAX_AMOUNT = 150000

ACCOUNT_REFERENCE_MAX = 12
TRANSACTION_DESC_MAX = 20

COUNTRY_CODE = '254'

# Safaricom subscriber numbers: 7XXXXXXXX and 1XXXXXXXX
_SUBSCRIBER_RE = re.compile(r'^[17]\d{8}$')


def _strip_prefix(digits: str) -> str:
    if digits.startswith('+' + COUNTRY_CODE):
        return digits[len(COUNTRY_CODE) + 1:]
    if digits.startswith(COUNTRY_CODE):
        return digits[len(COUNTRY_CODE):]
    if digits.startswith('0'):
        return digits[1:]
    return digits


def validate_phone_number(phone: Any) -> tuple[bool, Optional[str]]:
    """
    Validate a Kenyan mobile number

    Accepts 0XXXXXXXXX, +254XXXXXXXXX, 254XXXXXXXXX and the bare
    9-digit subscriber number; spaces, dashes and brackets are ignored.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if phone is None or str(phone).strip() == '':
        return False, "Phone number is required"

    phone_clean = re.sub(r'[\s\-\(\)]', '', str(phone))

    if not re.match(r'^\+?\d+$', phone_clean):
        return False, "Phone number must contain only digits and optional leading +"

    if not _SUBSCRIBER_RE.match(_strip_prefix(phone_clean)):
        return False, "Invalid phone number format"

    return True, None


def sanitize_phone_number(phone: Any) -> str:
    """
    Canonical 254XXXXXXXXX form of a phone number that passed validate_phone_number()
    """
    phone_clean = re.sub(r'[\s\-\(\)]', '', str(phone))
    return COUNTRY_CODE + _strip_prefix(phone_clean)


def validate_amount(amount: Any, min_amount: int = MIN_AMOUNT, max_amount: int = MAX_AMOUNT) -> tuple[
    bool, Optional[str]]:
    """
    Validate an STK Push amount: a whole number of shillings within the Daraja bounds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if amount is None or amount == '':
        return False, "Amount is required"

    if isinstance(amount, bool):
        return False, "Amount must be a number"

    try:
        if isinstance(amount, str):
            amount_decimal = Decimal(amount.strip())
        elif isinstance(amount, (int, float)):
            amount_decimal = Decimal(str(amount))
        elif isinstance(amount, Decimal):
            amount_decimal = amount
        else:
            return False, f"Amount must be a number, got {type(amount).__name__}"

        if amount_decimal != amount_decimal.to_integral_value():
            return False, "Amount must be a whole number"

        if amount_decimal < min_amount or amount_decimal > max_amount:
            return False, f"Amount must be between {min_amount:,} and {max_amount:,} KES"

    except (InvalidOperation, ValueError) as e:
        return False, f"Invalid amount format: {str(e)}"

    return True, None


def to_whole_amount(amount: Any) -> int:
    """Integer value of an amount that passed validate_amount()"""
    if isinstance(amount, str):
        amount = amount.strip()
    return int(Decimal(str(amount)))


def sanitize_text(value: Any, max_length: int, default: str = '') -> str:
    """
    Reduce free text to the alphanumeric subset Daraja accepts, capped at max_length.

    Falls back to ``default`` (sanitised the same way) when nothing survives.
    """
    cleaned = re.sub(r'[^A-Za-z0-9]', '', str(value or ''))[:max_length]
    if cleaned:
        return cleaned
    return re.sub(r'[^A-Za-z0-9]', '', default)[:max_length]
