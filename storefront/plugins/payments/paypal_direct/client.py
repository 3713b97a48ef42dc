"""
PayPal REST API Client

Implements PayPal OAuth 2.0 client-credentials authentication and the
payment calls used by direct (credit card) payments:
- Create payment (authorize or sale)
- Capture / void an authorization
- Refund a sale

All external API calls are logged. Failures surface as PaymentGatewayError.
"""
import base64
import logging
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from storefront.core.config import settings
from storefront.core.error_handler import sanitize_error_message
from storefront.core.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

# OAuth endpoint
OAUTH_TOKEN_PATH = "/v1/oauth2/token"

# API endpoints
PAYMENT_PATH = "/v1/payments/payment"
CAPTURE_PATH = "/v1/payments/authorization/{authorization_id}/capture"
VOID_PATH = "/v1/payments/authorization/{authorization_id}/void"
REFUND_PATH = "/v1/payments/sale/{sale_id}/refund"


def format_amount(amount: Decimal) -> str:
    """PayPal amounts are strings with two decimals."""
    return f"{Decimal(amount):.2f}"


class PayPalClient:
    """
    PayPal API Client with OAuth 2.0 authentication.

    Handles token refresh and provides methods for the payment operations.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        use_sandbox: bool = False,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id or ""
        self.client_secret = client_secret or ""
        self.use_sandbox = use_sandbox
        self.timeout = timeout or settings.PAYMENT_API_TIMEOUT_SECONDS
        self._transport = transport
        self._access_token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return settings.PAYPAL_SANDBOX_URL if self.use_sandbox else settings.PAYPAL_PRODUCTION_URL

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _ensure_token(self) -> str:
        """Ensure we have a valid OAuth token."""
        if self._access_token and self._token_expires_at:
            # Refresh 5 minutes before expiry
            if datetime.now(timezone.utc) < self._token_expires_at - timedelta(minutes=5):
                return self._access_token

        client = await self._get_http_client()
        url = f"{self.base_url}{OAUTH_TOKEN_PATH}"

        auth_string = f"{self.client_id}:{self.client_secret}"
        auth_header = base64.b64encode(auth_string.encode()).decode()

        try:
            response = await client.post(
                url,
                headers={
                    "Authorization": f"Basic {auth_header}",
                    "Accept": "application/json",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials"},
            )
        except httpx.RequestError as e:
            logger.error(f"PayPal OAuth request failed: {sanitize_error_message(e)}")
            raise PaymentGatewayError(f"Network error during authentication: {e}", code="NETWORK_ERROR")

        if response.status_code != 200:
            logger.error(f"PayPal OAuth failed: {response.status_code}")
            raise PaymentGatewayError(
                "Failed to authenticate with PayPal",
                status_code=response.status_code,
                code="AUTH_FAILED",
            )

        data = response.json()
        self._access_token = data["access_token"]
        expires_in = int(data.get("expires_in", 3600))
        self._token_expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

        logger.info(f"PayPal OAuth token obtained, expires in {expires_in}s")
        return self._access_token

    async def _make_request(self, method: str, path: str, data: Optional[Dict] = None) -> Dict:
        """Make authenticated API request."""
        token = await self._ensure_token()
        client = await self._get_http_client()
        url = f"{self.base_url}{path}"

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            response = await client.request(method, url, headers=headers, json=data)
        except httpx.RequestError as e:
            logger.error(f"PayPal API request failed: {sanitize_error_message(e)}")
            raise PaymentGatewayError(f"Network error: {e}", code="NETWORK_ERROR")

        logger.debug(f"PayPal API {method} {path} -> {response.status_code}")

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"raw": response.text[:500]}

            error_msg = error_data.get("message") or f"PayPal API error (HTTP {response.status_code})"
            issues = [d.get("issue") for d in error_data.get("details", []) if d.get("issue")]
            if issues:
                error_msg = f"{error_msg}: {'; '.join(issues)}"

            logger.error(f"PayPal API error: {error_data.get('name', response.status_code)} - {sanitize_error_message(error_msg)}")
            raise PaymentGatewayError(
                error_msg,
                status_code=response.status_code,
                details={"name": error_data.get("name"), "debug_id": error_data.get("debug_id")},
            )

        if not response.content:
            return {}
        return response.json()

    # ==================== Payments ====================

    async def create_payment(self, payment: Dict[str, Any]) -> Dict:
        """Create a credit card payment (intent "authorize" or "sale")."""
        return await self._make_request("POST", PAYMENT_PATH, data=payment)

    async def capture_authorization(
        self,
        authorization_id: str,
        amount: Decimal,
        currency_code: str,
        is_final_capture: bool = True,
    ) -> Dict:
        data = {
            "amount": {"total": format_amount(amount), "currency": currency_code},
            "is_final_capture": is_final_capture,
        }
        return await self._make_request("POST", CAPTURE_PATH.format(authorization_id=authorization_id), data=data)

    async def void_authorization(self, authorization_id: str) -> Dict:
        return await self._make_request("POST", VOID_PATH.format(authorization_id=authorization_id))

    async def refund_sale(self, sale_id: str, amount: Decimal, currency_code: str) -> Dict:
        data = {"amount": {"total": format_amount(amount), "currency": currency_code}}
        return await self._make_request("POST", REFUND_PATH.format(sale_id=sale_id), data=data)
