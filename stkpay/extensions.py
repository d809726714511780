import time
from datetime import datetime

import redis
from flask import current_app

from stkpay.providers import build_daraja_client
from stkpay.services import (
    CallbackParser,
    InMemoryRateLimiter,
    InMemoryTransactionStore,
    PushInitiator,
    Reaper,
    RedisRateLimiter,
    RedisTransactionStore,
    StatusResolver,
    TokenCache,
    WebhookService,
)


class RedisClient:
    def __init__(self):
        self.client = None

    def init_app(self, app):
        self.client = redis.Redis.from_url(app.config["REDIS_URL"], decode_responses=True)


redis_client = RedisClient()


class Services:
    """Everything a request handler needs, built once per application."""

    def __init__(self, config, clock=None, now=None, daraja=None, redis=None):
        self.clock = clock or time.time
        self.started_at = self.clock()
        now = now or datetime.now

        self.daraja = daraja or build_daraja_client(config)
        self.token_cache = TokenCache(
            fetch=self.daraja.request_token,
            clock=self.clock,
            safety_margin=config.get('TOKEN_SAFETY_MARGIN', 60)
        )

        max_requests = config.get('RATE_LIMIT_MAX_REQUESTS', 10)
        window_seconds = config.get('RATE_LIMIT_WINDOW_SECONDS', 60)
        retention = config.get('TRANSACTION_RETENTION_SECONDS', 600)

        self.backend = config.get('STATE_BACKEND', 'memory')
        if self.backend == 'redis':
            self.redis = redis if redis is not None else redis_client.client
            self.rate_limiter = RedisRateLimiter(self.redis, max_requests, window_seconds, clock=self.clock)
            self.store = RedisTransactionStore(self.redis, retention)
        elif self.backend == 'memory':
            self.redis = None
            self.rate_limiter = InMemoryRateLimiter(max_requests, window_seconds, clock=self.clock)
            self.store = InMemoryTransactionStore(retention, clock=self.clock)
        else:
            raise ValueError(f"STATE_BACKEND must be 'memory' or 'redis', got '{self.backend}'")

        self.parser = CallbackParser(clock=self.clock)
        self.webhooks = WebhookService(self.parser, self.store)
        self.initiator = PushInitiator(
            daraja=self.daraja,
            token_cache=self.token_cache,
            callback_url=config.get('MPESA_CALLBACK_URL'),
            party_b=config.get('MPESA_PARTY_B'),
            transaction_type=config.get('MPESA_TRANSACTION_TYPE', 'CustomerBuyGoodsOnline'),
            default_reference=config.get('MPESA_DEFAULT_REFERENCE', 'Payment'),
            default_description=config.get('MPESA_DEFAULT_DESCRIPTION', 'Payment'),
            now=now
        )
        self.resolver = StatusResolver(self.store, self.daraja, self.token_cache, now=now)

        # Redis expires its own keys; only in-process state needs sweeping
        self.reaper = Reaper(
            [self.store, self.rate_limiter] if self.backend == 'memory' else [],
            interval_seconds=config.get('REAPER_INTERVAL_SECONDS', 30)
        )


class StkPay:
    """Flask extension holding the per-application Services"""

    def __init__(self, app=None, **overrides):
        if app is not None:
            self.init_app(app, **overrides)

    def init_app(self, app, **overrides):
        if app.config.get('STATE_BACKEND') == 'redis' and overrides.get('redis') is None:
            redis_client.init_app(app)

        services = Services(app.config, **overrides)
        app.extensions['stkpay'] = services

        if app.config.get('REAPER_ENABLED', True):
            services.reaper.start()

        return services


stkpay_ext = StkPay()


def get_services() -> Services:
    return current_app.extensions['stkpay']
