"""
Utils Package
Utility functions and helpers
"""

from stkpay.utils.logger import get_logger, configure_app_logging, RequestLogger, redact
from stkpay.utils.validators import (
    validate_phone_number,
    sanitize_phone_number,
    validate_amount,
    to_whole_amount,
    sanitize_text
)

__all__ = [
    'get_logger',
    'configure_app_logging',
    'RequestLogger',
    'redact',
    'validate_phone_number',
    'sanitize_phone_number',
    'validate_amount',
    'to_whole_amount',
    'sanitize_text'
]
