"""
API Blueprints Package
Registers all API blueprints
"""

from stkpay.api.payments import payments_bp
from stkpay.api.webhooks import webhooks_bp
from stkpay.api.health import health_bp

# Export blueprints
__all__ = [
    'payments_bp',
    'webhooks_bp',
    'health_bp',
    'register_blueprints'
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app

    The STK Push surface is served from the root (/push, /status, /webhook,
    /health) because that is where Daraja and the polling clients expect it.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(payments_bp)
    app.register_blueprint(webhooks_bp)
    app.register_blueprint(health_bp)
