"""
Unit Tests for STK Push status resolution
"""

from datetime import datetime
from unittest.mock import Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from stkpay.errors import DarajaAPIError, UpstreamAuthError, UpstreamTimeout, UpstreamUnavailable
from stkpay.models import OutcomeRecord, PushStatus
from stkpay.services.status_resolver import (
    PENDING_MESSAGE,
    PROCESSING_MESSAGE,
    Resolution,
    StatusResolver,
)
from stkpay.services.transaction_store import InMemoryTransactionStore, RedisTransactionStore


class TestStatusResolver:

    @pytest.fixture
    def store(self, clock):
        return InMemoryTransactionStore(clock=clock)

    @pytest.fixture
    def daraja(self):
        daraja = Mock()
        daraja.stk_query.return_value = {"ResultCode": "0", "ResultDesc": "The service request is processed successfully."}
        return daraja

    @pytest.fixture
    def token_cache(self):
        token_cache = Mock()
        token_cache.get_token.return_value = Mock(value="daraja_tok_abc")
        return token_cache

    @pytest.fixture
    def resolver(self, store, daraja, token_cache):
        return StatusResolver(store, daraja, token_cache, now=lambda: datetime(2024, 1, 1, 12, 0, 0))

    def test_stored_success_resolves_without_network(self, resolver, store, daraja, token_cache):
        store.put("ws_CO_1", OutcomeRecord(
            correlation_id="ws_CO_1",
            result_code=0,
            result_description="Success",
            receipt_number="ABC123",
            amount=50,
        ))

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.SUCCESS
        assert resolution.message == "Success"
        assert resolution.receipt_number == "ABC123"
        assert resolution.amount == 50
        assert resolution.source == "callback"
        assert daraja.stk_query.call_count == 0
        assert token_cache.get_token.call_count == 0

    def test_stored_failure_uses_table_message_when_desc_empty(self, resolver, store):
        store.put("ws_CO_1", OutcomeRecord(correlation_id="ws_CO_1", result_code=1032))

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.CANCELLED
        assert resolution.message == "Transaction cancelled by user"

    def test_query_timeout_code(self, resolver, daraja):
        daraja.stk_query.return_value = {"ResultCode": "1037", "ResultDesc": "DS timeout user cannot be reached"}

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.TIMEOUT
        assert resolution.result_code == 1037
        assert resolution.source == "query"
        daraja.stk_query.assert_called_once()
        assert daraja.stk_query.call_args[0][:2] == ("ws_CO_1", "daraja_tok_abc")

    @pytest.mark.parametrize("code, status", [
        ("0", PushStatus.SUCCESS),
        (1032, PushStatus.CANCELLED),
        ("2001", PushStatus.FAILED),
        ("1", PushStatus.FAILED),
        ("4999", PushStatus.PENDING),
    ])
    def test_query_codes_mapped(self, resolver, daraja, code, status):
        daraja.stk_query.return_value = {"ResultCode": code, "ResultDesc": "from daraja"}

        assert resolver.resolve("ws_CO_1").status == status

    def test_unknown_query_code_keeps_daraja_description(self, resolver, daraja):
        daraja.stk_query.return_value = {"ResultCode": "4999", "ResultDesc": "Something new"}

        assert resolver.resolve("ws_CO_1").message == "Something new"

    def test_query_without_result_code_is_pending(self, resolver, daraja):
        daraja.stk_query.return_value = {"ResponseCode": "0"}

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.PENDING
        assert resolution.message == PROCESSING_MESSAGE

    def test_still_processing_error_is_pending(self, resolver, daraja):
        daraja.stk_query.side_effect = DarajaAPIError(
            "The transaction is being processed", error_code="500.001.1001", http_status=500
        )

        resolution = resolver.resolve("ws_CO_1")

        assert resolution == Resolution.pending(PROCESSING_MESSAGE)

    @pytest.mark.parametrize("error", [
        DarajaAPIError("Invalid CheckoutRequestID", error_code="400.002.02"),
        UpstreamUnavailable("network error"),
        UpstreamTimeout("timed out"),
    ])
    def test_upstream_errors_degrade_to_pending(self, resolver, daraja, error):
        daraja.stk_query.side_effect = error

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.PENDING
        assert resolution.message == PENDING_MESSAGE

    def test_auth_error_invalidates_token(self, resolver, daraja, token_cache):
        daraja.stk_query.side_effect = UpstreamAuthError("Invalid Access Token")

        assert resolver.resolve("ws_CO_1").status == PushStatus.PENDING
        token_cache.invalidate.assert_called_once()

    def test_token_failure_is_pending(self, resolver, daraja, token_cache):
        token_cache.get_token.side_effect = UpstreamAuthError("OAuth down")

        assert resolver.resolve("ws_CO_1").status == PushStatus.PENDING
        daraja.stk_query.assert_not_called()

    def test_callback_arriving_during_query_wins(self, resolver, store, daraja):
        def query_while_callback_lands(*args):
            store.put("ws_CO_1", OutcomeRecord(
                correlation_id="ws_CO_1", result_code=0, result_description="Success", receipt_number="ABC123"
            ))
            return {"ResultCode": "1037", "ResultDesc": "DS timeout user cannot be reached"}

        daraja.stk_query.side_effect = query_while_callback_lands

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.SUCCESS
        assert resolution.receipt_number == "ABC123"

    def test_lookup_never_queries(self, resolver, daraja):
        assert resolver.lookup("ws_CO_1") is None
        daraja.stk_query.assert_not_called()


class TestStatusResolverRedisFailures:
    """Store read failures on a shared backend degrade like upstream failures"""

    @pytest.fixture
    def broken_redis(self):
        broken = Mock()
        broken.get.side_effect = RedisConnectionError("connection refused")
        return broken

    @pytest.fixture
    def daraja(self):
        daraja = Mock()
        daraja.stk_query.return_value = {"ResultCode": "1037", "ResultDesc": "DS timeout user cannot be reached"}
        return daraja

    @pytest.fixture
    def token_cache(self):
        token_cache = Mock()
        token_cache.get_token.return_value = Mock(value="daraja_tok_abc")
        return token_cache

    def test_unreadable_store_falls_through_to_query(self, broken_redis, daraja, token_cache):
        resolver = StatusResolver(RedisTransactionStore(broken_redis), daraja, token_cache)

        resolution = resolver.resolve("ws_CO_1")

        assert resolution.status == PushStatus.TIMEOUT
        assert resolution.source == "query"
        daraja.stk_query.assert_called_once()
        assert broken_redis.get.call_count == 2

    def test_failed_recheck_keeps_query_result(self, daraja, token_cache):
        flaky = Mock()
        flaky.get.side_effect = [None, RedisConnectionError("connection reset")]
        resolver = StatusResolver(RedisTransactionStore(flaky), daraja, token_cache)

        assert resolver.resolve("ws_CO_1").status == PushStatus.TIMEOUT

    def test_unreadable_store_and_upstream_is_pending(self, broken_redis, daraja, token_cache):
        daraja.stk_query.side_effect = UpstreamUnavailable("network error")
        resolver = StatusResolver(RedisTransactionStore(broken_redis), daraja, token_cache)

        assert resolver.resolve("ws_CO_1") == Resolution.pending()
