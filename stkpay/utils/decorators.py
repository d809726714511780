"""
Custom Decorators
Rate limiting for the public endpoints
"""

from functools import wraps
from flask import request, jsonify

from stkpay.extensions import get_services
from stkpay.utils.logger import get_logger

logger = get_logger(__name__)


def client_identifier() -> str:
    """First X-Forwarded-For hop when behind a proxy, else the peer address"""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


def rate_limit(f):
    """
    Rate limiting decorator backed by the application's RateLimiter

    Limits come from RATE_LIMIT_MAX_REQUESTS / RATE_LIMIT_WINDOW_SECONDS.
    The guard is per deployment of the configured backend, not global.

    Usage:
        @rate_limit
        def my_endpoint():
            return "Success"
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        limiter = get_services().rate_limiter
        client_id = client_identifier()

        if not limiter.allow(client_id):
            logger.warning(f'Rate limit exceeded for {client_id} on {request.path}')
            return jsonify({
                'success': False,
                'error': 'Too many requests. Please wait a moment and try again.',
                'message': f'Maximum {limiter.max_requests} requests per {limiter.window_seconds} seconds',
                'retry_after': limiter.window_seconds
            }), 429

        return f(*args, **kwargs)

    return decorated_function
