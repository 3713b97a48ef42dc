"""
Canada Post API Client

Implements the two web services the plugin uses:
- Rating (get rates for a mailing scenario)
- Tracking (tracking detail for a PIN)

All external API calls are logged. Failures surface as CarrierAPIError
carrying Canada Post's own error text.
"""
import base64
import logging
from typing import Dict, List, Optional

import httpx

from storefront.core.config import settings
from storefront.core.error_handler import sanitize_error_message
from storefront.core.exceptions import CarrierAPIError
from storefront.plugins.shipping.canada_post.mailing_scenario import (
    MailingScenario,
    PriceQuote,
    TrackingOccurrence,
    parse_error_messages,
    parse_price_quotes,
    parse_tracking_detail,
)

logger = logging.getLogger(__name__)

# API endpoints
RATING_PATH = "/rs/ship/price"
TRACKING_DETAIL_PATH = "/vis/track/pin/{pin}/detail"

RATE_MEDIA_TYPE = "application/vnd.cpc.ship.rate-v4+xml"
TRACK_MEDIA_TYPE = "application/vnd.cpc.track-v2+xml"


class CanadaPostClient:
    """
    Canada Post REST client.

    api_key is the "username:password" pair sent as HTTP basic auth.
    """

    def __init__(
        self,
        api_key: str,
        use_sandbox: bool = False,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or ""
        self.use_sandbox = use_sandbox
        self.timeout = timeout or settings.CARRIER_API_TIMEOUT_SECONDS
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return settings.CANADA_POST_SANDBOX_URL if self.use_sandbox else settings.CANADA_POST_PRODUCTION_URL

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def _headers(self, media_type: str) -> Dict[str, str]:
        auth_header = base64.b64encode(self.api_key.encode()).decode()
        return {
            "Authorization": f"Basic {auth_header}",
            "Accept": media_type,
            "Content-Type": media_type,
            "Accept-language": "en-CA",
        }

    async def _make_request(self, method: str, path: str, media_type: str, content: Optional[bytes] = None) -> bytes:
        client = await self._get_http_client()
        url = f"{self.base_url}{path}"

        try:
            response = await client.request(method, url, headers=self._headers(media_type), content=content)
        except httpx.RequestError as e:
            logger.error(f"Canada Post API request failed: {sanitize_error_message(e)}")
            raise CarrierAPIError(f"Network error: {e}")

        logger.debug(f"Canada Post API {method} {path} -> {response.status_code}")

        if response.status_code >= 400:
            messages = parse_error_messages(response.content)
            error_msg = "; ".join(messages) if messages else f"Canada Post API error (HTTP {response.status_code})"
            logger.error(f"Canada Post API error: {response.status_code} - {sanitize_error_message(error_msg)}")
            raise CarrierAPIError(error_msg, status_code=response.status_code)

        return response.content

    # ==================== Rating ====================

    async def get_shipping_services(self, scenario: MailingScenario) -> List[PriceQuote]:
        """
        Get rates for a mailing scenario.

        Raises:
            CarrierAPIError: transport failure, error reply or unreadable reply
        """
        content = await self._make_request("POST", RATING_PATH, RATE_MEDIA_TYPE, scenario.to_xml())
        try:
            quotes = parse_price_quotes(content)
        except ValueError as e:
            logger.error(f"Canada Post rating reply could not be read: {e}")
            raise CarrierAPIError(str(e))

        logger.info(f"Canada Post returned {len(quotes)} price quotes")
        return quotes

    # ==================== Tracking ====================

    async def get_tracking_details(self, pin: str) -> List[TrackingOccurrence]:
        """
        Get significant tracking events for a parcel PIN.

        Raises:
            CarrierAPIError: transport failure, error reply or unreadable reply
        """
        path = TRACKING_DETAIL_PATH.format(pin=pin.strip())
        content = await self._make_request("GET", path, TRACK_MEDIA_TYPE)
        try:
            return parse_tracking_detail(content)
        except ValueError as e:
            logger.error(f"Canada Post tracking reply could not be read: {e}")
            raise CarrierAPIError(str(e))
