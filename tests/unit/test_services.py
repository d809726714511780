"""
Unit Tests for the per-application service registry
"""

from unittest.mock import Mock

import pytest

from stkpay.extensions import Services
from stkpay.services import (
    InMemoryRateLimiter,
    InMemoryTransactionStore,
    RedisRateLimiter,
    RedisTransactionStore,
)


@pytest.fixture
def base_config():
    return {
        "MPESA_CONSUMER_KEY": "k",
        "MPESA_CONSUMER_SECRET": "s",
        "MPESA_SHORTCODE": "174379",
        "MPESA_PASSKEY": "p",
        "MPESA_CALLBACK_URL": "https://example.com/webhook",
        "RATE_LIMIT_MAX_REQUESTS": 3,
        "RATE_LIMIT_WINDOW_SECONDS": 30,
        "TRANSACTION_RETENTION_SECONDS": 120,
    }


class TestServices:

    def test_memory_backend(self, base_config, clock):
        services = Services({**base_config, "STATE_BACKEND": "memory"}, clock=clock)

        assert isinstance(services.store, InMemoryTransactionStore)
        assert isinstance(services.rate_limiter, InMemoryRateLimiter)
        assert services.store.retention_seconds == 120
        assert services.rate_limiter.max_requests == 3
        assert services.reaper.targets == [services.store, services.rate_limiter]
        assert services.started_at == clock()

    def test_redis_backend(self, base_config, redis_client):
        services = Services({**base_config, "STATE_BACKEND": "redis"}, redis=redis_client)

        assert isinstance(services.store, RedisTransactionStore)
        assert isinstance(services.rate_limiter, RedisRateLimiter)
        assert services.store.redis is redis_client
        assert services.reaper.targets == []

    def test_unknown_backend_rejected(self, base_config):
        with pytest.raises(ValueError, match="STATE_BACKEND"):
            Services({**base_config, "STATE_BACKEND": "memcached"})

    def test_injected_daraja_client_shared(self, base_config):
        daraja = Mock(shortcode="174379")
        daraja.request_token.return_value = ("tok", 3600)

        services = Services(base_config, daraja=daraja)

        assert services.initiator.daraja is daraja
        assert services.resolver.daraja is daraja
        assert services.token_cache.get_token().value == "tok"

    def test_party_b_falls_back_to_shortcode(self, base_config):
        services = Services({**base_config, "MPESA_PARTY_B": ""})

        assert services.initiator.party_b == "174379"
