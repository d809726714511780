from flask import Flask, jsonify
from flask_cors import CORS

from stkpay.config import config
from stkpay.errors import AppError
from stkpay.extensions import stkpay_ext
from stkpay.utils.logger import RequestLogger, configure_app_logging, get_logger

logger = get_logger(__name__)


def create_app(config_name='development', **overrides):
    """Application factory pattern

    ``overrides`` are handed to the StkPay extension so tests can inject a
    clock, a Daraja client or a Redis connection.
    """
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Initialize extensions
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))
    configure_app_logging(app)
    RequestLogger(app)
    stkpay_ext.init_app(app, **overrides)

    # Register blueprints
    from stkpay.api import register_blueprints
    register_blueprints(app)

    # Error handlers
    register_error_handlers(app)

    return app


def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(AppError)
    def app_error(error):
        if not error.expose:
            logger.error(f'{error.error}: {error.message}')
        return jsonify({
            'success': False,
            'error': error.error,
            'message': error.public_message
        }), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'success': False, 'error': 'Bad request', 'message': str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Not found', 'message': str(error)}), 404

    @app.errorhandler(413)
    def request_too_large(error):
        return jsonify({
            'success': False,
            'error': 'Request too large',
            'message': f"Request body exceeds {app.config['MAX_CONTENT_LENGTH']} bytes"
        }), 413

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed', 'message': str(error)}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f'Unhandled error: {error}')
        return jsonify({
            'success': False,
            'error': 'Internal server error',
            'message': 'An unexpected error occurred'
        }), 500
