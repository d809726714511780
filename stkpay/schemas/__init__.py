"""
Schemas Package
Marshmallow schemas for request/response validation
"""

from stkpay.schemas.payment_schema import (
    PushRequestSchema,
    StatusRequestSchema,
    PushResponseSchema,
    StatusResponseSchema,
    OutcomeRecordSchema
)
from stkpay.schemas.webhook_schema import (
    MPesaCallbackSchema
)

__all__ = [
    'PushRequestSchema',
    'StatusRequestSchema',
    'PushResponseSchema',
    'StatusResponseSchema',
    'OutcomeRecordSchema',
    'MPesaCallbackSchema'
]
