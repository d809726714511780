"""
Webhook Validation Schemas
Shape of the Daraja STK Push callback envelope:

    {"Body": {"stkCallback": {
        "MerchantRequestID": "...", "CheckoutRequestID": "...",
        "ResultCode": 0, "ResultDesc": "...",
        "CallbackMetadata": {"Item": [{"Name": "...", "Value": ...}, ...]}}}}
"""

from marshmallow import EXCLUDE, Schema, fields, validate


class ResultCodeField(fields.Integer):
    """Integer that also takes digit strings but never truncates a fractional number"""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, float) and not value.is_integer():
            raise self.make_error('invalid')
        return super()._deserialize(value, attr, data, **kwargs)


class StkCallbackSchema(Schema):
    """The ``stkCallback`` object; unknown keys are ignored."""

    class Meta:
        unknown = EXCLUDE

    MerchantRequestID = fields.Str(load_default=None, allow_none=True)
    CheckoutRequestID = fields.Str(required=True, validate=validate.Length(min=1))
    ResultCode = ResultCodeField(required=True, strict=False)
    ResultDesc = fields.Str(load_default='', allow_none=True)
    # Folded by CallbackParser; only read when ResultCode is 0
    CallbackMetadata = fields.Raw(load_default=None, allow_none=True)


class CallbackBodySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    stkCallback = fields.Nested(StkCallbackSchema, required=True)


class MPesaCallbackSchema(Schema):
    """M-Pesa callback validation schema"""

    class Meta:
        unknown = EXCLUDE

    Body = fields.Nested(CallbackBodySchema, required=True)
