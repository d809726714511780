from marshmallow import EXCLUDE, Schema, fields, post_dump, post_load, validate

from stkpay.models import OutcomeRecord


class PushRequestSchema(Schema):
    """STK Push initiation request.

    phone and amount are only checked for presence here; their format and
    bounds are enforced by PushInitiator so every caller gets the same rules.
    """

    class Meta:
        unknown = EXCLUDE

    phone = fields.Raw(required=True)
    amount = fields.Raw(required=True)
    reference = fields.Str(load_default=None, allow_none=True)
    description = fields.Str(load_default=None, allow_none=True)


class StatusRequestSchema(Schema):
    """Status poll request"""

    class Meta:
        unknown = EXCLUDE

    correlation_id = fields.Str(
        required=True,
        data_key='correlationId',
        validate=validate.Length(min=1)
    )


class PushResponseSchema(Schema):
    """STK Push acceptance response"""
    success = fields.Constant(True, dump_only=True)
    correlation_id = fields.Str(data_key='correlationId', dump_only=True)
    peer_correlation_id = fields.Str(data_key='peerCorrelationId', dump_only=True, allow_none=True)
    customer_message = fields.Str(data_key='message', dump_only=True, allow_none=True)


class StatusResponseSchema(Schema):
    """Status poll response; optional payment details are omitted when unknown"""
    OPTIONAL = ('receiptNumber', 'amount', 'phone', 'transactionDate')

    success = fields.Constant(True, dump_only=True)
    status = fields.Function(lambda r: r.status.value, dump_only=True)
    result_code = fields.Function(
        lambda r: None if r.result_code is None else str(r.result_code),
        data_key='resultCode',
        dump_only=True
    )
    message = fields.Str(dump_only=True)
    receipt_number = fields.Str(data_key='receiptNumber', dump_only=True)
    amount = fields.Raw(dump_only=True)
    phone = fields.Str(dump_only=True)
    transaction_date = fields.Str(data_key='transactionDate', dump_only=True)

    @post_dump
    def drop_unknown_details(self, data, **kwargs):
        for key in self.OPTIONAL:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class OutcomeRecordSchema(Schema):
    """Callback outcome as stored in Redis and returned by GET /result/<id>"""

    class Meta:
        unknown = EXCLUDE

    correlation_id = fields.Str(required=True, data_key='correlationId')
    peer_correlation_id = fields.Str(allow_none=True, load_default=None, data_key='peerCorrelationId')
    result_code = fields.Integer(required=True, data_key='resultCode')
    result_description = fields.Str(allow_none=True, load_default='', data_key='resultDesc')
    succeeded = fields.Boolean(dump_only=True)
    receipt_number = fields.Str(allow_none=True, load_default=None, data_key='receiptNumber')
    amount = fields.Raw(allow_none=True, load_default=None)
    phone = fields.Str(allow_none=True, load_default=None)
    transaction_timestamp = fields.Str(allow_none=True, load_default=None, data_key='transactionDate')
    recorded_at = fields.Float(load_default=0.0, data_key='recordedAt')

    @post_load
    def make_record(self, data, **kwargs):
        return OutcomeRecord(**data)
