from stkpay.models.outcome import AccessToken, OutcomeRecord, RateWindow
from stkpay.models.push_status import PushStatus, RESULT_CODES, parse_code, status_for_code, describe_code, is_known_code

__all__ = ['AccessToken', 'OutcomeRecord', 'RateWindow', 'PushStatus', 'RESULT_CODES', 'parse_code', 'status_for_code', 'describe_code', 'is_known_code']
