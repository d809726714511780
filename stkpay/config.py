import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    return os.getenv(name, str(default)).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    JSON_SORT_KEYS = False

    # Largest request body accepted on the public endpoints (bytes)
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', str(10 * 1024)))

    # Daraja credentials
    MPESA_CONSUMER_KEY = os.getenv('MPESA_CONSUMER_KEY', '')
    MPESA_CONSUMER_SECRET = os.getenv('MPESA_CONSUMER_SECRET', '')
    MPESA_SHORTCODE = os.getenv('MPESA_SHORTCODE', '')
    MPESA_PASSKEY = os.getenv('MPESA_PASSKEY', '')
    MPESA_ENV = os.getenv('MPESA_ENV', 'sandbox')

    # STK Push request shape
    MPESA_PARTY_B = os.getenv('MPESA_PARTY_B', '')  # till number; falls back to the shortcode
    MPESA_TRANSACTION_TYPE = os.getenv('MPESA_TRANSACTION_TYPE', 'CustomerBuyGoodsOnline')
    MPESA_CALLBACK_URL = os.getenv('MPESA_CALLBACK_URL', 'http://localhost:5000/webhook')
    MPESA_DEFAULT_REFERENCE = os.getenv('MPESA_DEFAULT_REFERENCE', 'Payment')
    MPESA_DEFAULT_DESCRIPTION = os.getenv('MPESA_DEFAULT_DESCRIPTION', 'Payment')
    MPESA_HTTP_TIMEOUT = float(os.getenv('MPESA_HTTP_TIMEOUT', '30'))

    TOKEN_SAFETY_MARGIN = int(os.getenv('TOKEN_SAFETY_MARGIN', '60'))

    # Initiation guard
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv('RATE_LIMIT_MAX_REQUESTS', '10'))
    RATE_LIMIT_WINDOW_SECONDS = int(os.getenv('RATE_LIMIT_WINDOW_SECONDS', '60'))

    # Callback outcomes
    TRANSACTION_RETENTION_SECONDS = int(os.getenv('TRANSACTION_RETENTION_SECONDS', '600'))
    REAPER_INTERVAL_SECONDS = int(os.getenv('REAPER_INTERVAL_SECONDS', '30'))
    REAPER_ENABLED = _env_bool('REAPER_ENABLED', True)

    # "memory" keeps state in this process only; "redis" shares it via REDIS_URL
    STATE_BACKEND = os.getenv('STATE_BACKEND', 'memory')
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]

    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    MPESA_ENV = os.getenv('MPESA_ENV', 'production')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    MPESA_CONSUMER_KEY = 'test_consumer_key'
    MPESA_CONSUMER_SECRET = 'test_consumer_secret'
    MPESA_SHORTCODE = '174379'
    MPESA_PASSKEY = 'test_passkey'
    MPESA_ENV = 'sandbox'
    MPESA_PARTY_B = '5551234'
    MPESA_CALLBACK_URL = 'https://example.com/webhook'
    REAPER_ENABLED = False
    STATE_BACKEND = 'memory'
    LOG_DIR = ''


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
