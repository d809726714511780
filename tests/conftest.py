"""
Pytest Configuration and Fixtures
"""
import os

# Keep test runs from writing log files into the working tree
os.environ.setdefault('LOG_DIR', '')

from datetime import datetime

import fakeredis
import pytest

from stkpay import create_app

# Fixed local time used for Daraja timestamps in tests
FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0)


class FakeClock:
    """Monotonic test clock; call it to read, advance() to move it"""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(clock):
    """Create application for testing"""
    app = create_app('testing', clock=clock, now=lambda: FIXED_NOW)

    ctx = app.app_context()
    ctx.push()

    yield app

    ctx.pop()
    app.extensions['stkpay'].reaper.stop()


@pytest.fixture
def services(app):
    """The StkPay service registry of the test app"""
    return app.extensions['stkpay']


@pytest.fixture
def client(app):
    """Create a test client"""
    return app.test_client()


@pytest.fixture
def redis_client():
    """Fake Redis for the Redis-backed store and limiter"""
    fake_redis = fakeredis.FakeRedis(decode_responses=True)

    yield fake_redis

    fake_redis.flushall()


@pytest.fixture
def provider_config():
    return {
        "environment":     "sandbox",
        "consumer_key":    "test_consumer_key",
        "consumer_secret": "test_consumer_secret",
        "shortcode":       "174379",
        "passkey":         "test_passkey",
        "timeout":         5,
    }


def stk_callback(checkout_request_id, result_code=0, result_desc='Success', items=None, merchant_request_id=None):
    """Daraja STK callback body"""
    callback = {
        'CheckoutRequestID': checkout_request_id,
        'ResultCode': result_code,
        'ResultDesc': result_desc,
    }
    if merchant_request_id is not None:
        callback['MerchantRequestID'] = merchant_request_id
    if items is not None:
        callback['CallbackMetadata'] = {'Item': items}
    return {'Body': {'stkCallback': callback}}


@pytest.fixture
def callback_payload():
    return stk_callback
