from stkpay.services.callback_parser import CallbackParser
from stkpay.services.push_initiator import PushInitiator, PushReceipt
from stkpay.services.rate_limiter import RateLimiter, InMemoryRateLimiter, RedisRateLimiter
from stkpay.services.reaper import Reaper
from stkpay.services.status_resolver import StatusResolver, Resolution
from stkpay.services.token_cache import TokenCache
from stkpay.services.transaction_store import TransactionStore, InMemoryTransactionStore, RedisTransactionStore
from stkpay.services.webhook_service import WebhookService

__all__ = [
    'CallbackParser',
    'PushInitiator',
    'PushReceipt',
    'RateLimiter',
    'InMemoryRateLimiter',
    'RedisRateLimiter',
    'Reaper',
    'StatusResolver',
    'Resolution',
    'TokenCache',
    'TransactionStore',
    'InMemoryTransactionStore',
    'RedisTransactionStore',
    'WebhookService',
]
