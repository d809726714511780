from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from stkpay.extensions import get_services
from stkpay.schemas.payment_schema import (
    PushRequestSchema,
    StatusRequestSchema,
    PushResponseSchema,
    StatusResponseSchema,
    OutcomeRecordSchema
)
from stkpay.utils.decorators import rate_limit
from stkpay.utils.logger import get_logger

payments_bp = Blueprint('payments', __name__)
logger = get_logger(__name__)

push_request_schema = PushRequestSchema()
status_request_schema = StatusRequestSchema()
push_response_schema = PushResponseSchema()
status_response_schema = StatusResponseSchema()
outcome_schema = OutcomeRecordSchema()


def _validation_failed(e):
    return jsonify({
        'success': False,
        'error': 'Validation error',
        'message': 'Invalid request body',
        'details': e.messages
    }), 400


@payments_bp.route('/push', methods=['POST'])
@rate_limit
def initiate_push():
    """
    Start an STK Push on the payer's phone

    Body:
        {
            "phone": "0712345678",
            "amount": 50,
            "reference": "INV001",
            "description": "Order 1"
        }
    """
    try:
        data = push_request_schema.load(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _validation_failed(e)

    receipt = get_services().initiator.initiate(
        phone=data['phone'],
        amount=data['amount'],
        reference=data.get('reference'),
        description=data.get('description')
    )

    return jsonify(push_response_schema.dump(receipt)), 200


@payments_bp.route('/status', methods=['POST'])
def push_status():
    """
    Resolve the status of an earlier STK Push

    Body:
        {"correlationId": "ws_CO_..."}
    """
    try:
        data = status_request_schema.load(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _validation_failed(e)

    resolution = get_services().resolver.resolve(data['correlation_id'])
    logger.info(f"Status for {data['correlation_id']}: {resolution.status.value} ({resolution.source})")

    return jsonify(status_response_schema.dump(resolution)), 200


@payments_bp.route('/result/<correlation_id>', methods=['GET'])
def push_result(correlation_id):
    """
    Stored callback outcome for a correlation id, without querying Daraja

    Path Parameters:
        - correlation_id: CheckoutRequestID returned by /push
    """
    record = get_services().resolver.lookup(correlation_id)

    if record is None:
        return jsonify({'success': True, 'found': False}), 200

    return jsonify({
        'success': True,
        'found': True,
        'data': outcome_schema.dump(record)
    }), 200
