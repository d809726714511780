"""
Webhook API Endpoints
Receives STK Push result callbacks from Daraja
"""

from flask import Blueprint, request, jsonify

from stkpay.extensions import get_services
from stkpay.utils.logger import get_logger

webhooks_bp = Blueprint('webhooks', __name__)
logger = get_logger(__name__)


@webhooks_bp.route('/webhook', methods=['POST'])
def receive_webhook():
    """
    Receive an STK Push callback

    Daraja retries callbacks that are not acknowledged, so the answer is
    always 200 with ResultCode 0, whatever happened to the payload.

    Body:
        {"Body": {"stkCallback": {...}}}
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.get_data()

    try:
        get_services().webhooks.receive(payload)
    except Exception:
        logger.exception('Failed to process STK callback')

    return jsonify({
        'ResultCode': 0,
        'ResultDesc': 'Accepted'
    }), 200
