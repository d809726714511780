"""
M-Pesa Daraja client
Thin HTTP layer over the Safaricom Daraja API used by the STK Push flow.

Endpoints
---------
Authentication
    GET  /oauth/v1/generate?grant_type=client_credentials  (Basic auth)

STK Push (Lipa na M-Pesa Online)
    POST /mpesa/stkpush/v1/processrequest
    POST /mpesa/stkpushquery/v1/query         (status poll)

Callbacks are not handled here; see stkpay.services.callback_parser.

Required config keys
--------------------
    consumer_key        - From Safaricom Developer Portal app
    consumer_secret     - From Safaricom Developer Portal app
    shortcode           - Business shortcode (PayBill or Buy-Goods)
    passkey             - Lipa na M-Pesa Online passkey
    environment         - "sandbox" (default) | "production"

Optional config keys
--------------------
    timeout             - Seconds before an HTTP call is abandoned (default 30)

This class holds no token state: callers pass the bearer token in, and
obtain it through stkpay.services.token_cache.TokenCache, which calls
request_token() when it needs a fresh one.
"""

import base64
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import requests

from stkpay.errors import (
    DarajaAPIError,
    UpstreamAuthError,
    UpstreamTimeout,
    UpstreamUnavailable,
)
from stkpay.utils.logger import get_logger, redact

logger = get_logger(__name__)

# Daraja base URLs
_BASE_URLS = {
    "sandbox":    "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}

DEFAULT_TOKEN_LIFETIME = 3600


class DarajaClient:
    """Safaricom Daraja HTTP client for OAuth, STK Push and STK Push query."""

    # Daraja endpoint paths
    _EP_AUTH      = "/oauth/v1/generate"
    _EP_STK_PUSH  = "/mpesa/stkpush/v1/processrequest"
    _EP_STK_QUERY = "/mpesa/stkpushquery/v1/query"

    def __init__(self, config: Dict[str, Any]):
        self.consumer_key    = config.get("consumer_key") or ""
        self.consumer_secret = config.get("consumer_secret") or ""
        self.shortcode       = str(config.get("shortcode") or "")
        self.passkey         = config.get("passkey") or ""
        self.environment     = (config.get("environment") or "sandbox").lower()
        self.timeout         = float(config.get("timeout") or 30)

        if self.environment not in _BASE_URLS:
            raise ValueError(f"DarajaClient: environment must be 'sandbox' or 'production', got '{self.environment}'")

        self.base_url = _BASE_URLS[self.environment]

        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    # Auth

    def request_token(self) -> Tuple[str, int]:
        """
        Exchange the consumer key/secret for a bearer token.

        Returns (access_token, expires_in_seconds). Any failure - transport,
        non-2xx, or a body without a token - raises UpstreamAuthError.
        """
        if not self.consumer_key or not self.consumer_secret:
            raise UpstreamAuthError("DarajaClient: 'consumer_key' and 'consumer_secret' are required")

        url = f"{self.base_url}{self._EP_AUTH}?grant_type=client_credentials"
        try:
            resp = requests.get(
                url,
                auth=(self.consumer_key, self.consumer_secret),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamAuthError(
                f"DarajaClient: failed to obtain access token - {exc}"
            ) from exc

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise UpstreamAuthError("DarajaClient: token response did not contain an access_token")

        try:
            expires_in = int(data.get("expires_in", DEFAULT_TOKEN_LIFETIME))
        except (TypeError, ValueError) as exc:
            raise UpstreamAuthError(
                f"DarajaClient: unusable expires_in {data.get('expires_in')!r}"
            ) from exc

        logger.info("DarajaClient: access token issued (expires in %ds)", expires_in)
        return token, expires_in

    # STK Push

    def stk_push(self, payload: Dict[str, Any], token: str) -> Dict[str, Any]:
        """Send a processrequest body; returns the decoded Daraja response."""
        return self._post(self._EP_STK_PUSH, payload, token, context="stk_push")

    def stk_query(self, checkout_request_id: str, token: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Ask Daraja directly for the state of an STK Push."""
        timestamp, password = self.generate_password(now)
        payload = {
            "BusinessShortCode": self.shortcode,
            "Password":          password,
            "Timestamp":         timestamp,
            "CheckoutRequestID": checkout_request_id,
        }
        return self._post(self._EP_STK_QUERY, payload, token, context="stk_query")

    def generate_password(self, now: Optional[datetime] = None) -> Tuple[str, str]:
        """
        Generate the STK Push password and timestamp.

        Password = Base64(BusinessShortCode + Passkey + Timestamp)
        Timestamp = YYYYMMDDHHmmss on the local clock
        """
        timestamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
        raw = f"{self.shortcode}{self.passkey}{timestamp}"
        password = base64.b64encode(raw.encode("utf-8")).decode("utf-8")
        return timestamp, password

    # HTTP helpers

    def _post(
        self, endpoint: str, payload: Dict[str, Any], token: str, context: str = ""
    ) -> Dict[str, Any]:
        """Execute an authenticated POST to a Daraja endpoint."""
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type":  "application/json",
        }

        url = f"{self.base_url}{endpoint}"
        logger.info("Daraja [%s] request: %s", context, redact(payload))
        try:
            resp = self._session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise UpstreamTimeout(
                f"DarajaClient [{context}]: timed out after {self.timeout:g}s"
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailable(
                f"DarajaClient [{context}]: network error - {exc}"
            ) from exc

        return self._handle_response(resp, context)

    def _handle_response(
        self, resp: requests.Response, context: str
    ) -> Dict[str, Any]:
        """Parse Daraja response, raising on error codes."""
        try:
            data: Dict[str, Any] = resp.json()
        except ValueError:
            data = {"raw": resp.text}
        if not isinstance(data, dict):
            data = {"raw": data}

        logger.info("Daraja [%s] HTTP %s: %s", context, resp.status_code, data)

        if resp.status_code == 401:
            raise UpstreamAuthError(
                f"DarajaClient [{context}]: bearer token rejected - {data.get('errorMessage') or resp.text[:300]}"
            )

        # Daraja error bodies carry errorCode / errorMessage (e.g. "500.001.1001")
        error_code = data.get("errorCode")
        error_msg = data.get("errorMessage")

        if error_code or error_msg:
            raise DarajaAPIError(
                error_msg or f"Daraja error {error_code}",
                error_code=error_code,
                http_status=resp.status_code,
                body=data,
            )

        if not resp.ok:
            raise UpstreamUnavailable(
                f"DarajaClient [{context}] HTTP {resp.status_code}: {resp.text[:300]}"
            )

        return data
