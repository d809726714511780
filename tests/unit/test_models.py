"""
Unit Tests for the result-code table and outcome models
"""

import pytest

from stkpay.models import (
    AccessToken,
    OutcomeRecord,
    PushStatus,
    describe_code,
    is_known_code,
    parse_code,
    status_for_code,
)


class TestResultCodes:

    @pytest.mark.parametrize("code, status", [
        (0, PushStatus.SUCCESS),
        (1032, PushStatus.CANCELLED),
        (1037, PushStatus.TIMEOUT),
        (1, PushStatus.FAILED),
        (2001, PushStatus.FAILED),
        (1025, PushStatus.FAILED),
        (1019, PushStatus.FAILED),
        (17, PushStatus.FAILED),
        (2028, PushStatus.FAILED),
        (9999, PushStatus.PENDING),
        ("1032", PushStatus.CANCELLED),
        ("garbled", PushStatus.PENDING),
        (None, PushStatus.PENDING),
    ])
    def test_status_for_code(self, code, status):
        assert status_for_code(code) == status

    def test_parse_code(self):
        assert parse_code(" 0 ") == 0
        assert parse_code(1037) == 1037
        assert parse_code("x") is None
        assert parse_code(None) is None

    def test_describe_code(self):
        assert describe_code(1037) == "Transaction timed out. No response from user."
        assert describe_code(4242) == "Unknown result (code 4242)"

    def test_is_known_code(self):
        assert is_known_code("2001") is True
        assert is_known_code(4242) is False

    def test_status_serialises_as_string(self):
        assert PushStatus.TIMEOUT == "timeout"
        assert PushStatus.SUCCESS.value == "success"


class TestModels:

    def test_access_token_freshness(self):
        token = AccessToken(value="tok", expires_at=1000.0)

        assert token.is_fresh(900.0, margin=60) is True
        assert token.is_fresh(940.0, margin=60) is False

    def test_outcome_record_succeeded(self):
        assert OutcomeRecord(correlation_id="ws_CO_1", result_code=0).succeeded is True
        assert OutcomeRecord(correlation_id="ws_CO_1", result_code=1).succeeded is False
