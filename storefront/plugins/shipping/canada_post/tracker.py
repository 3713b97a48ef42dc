"""
Canada Post shipment tracker
"""
import logging
import re
from typing import List

from storefront.core.config import settings
from storefront.core.exceptions import CarrierAPIError
from storefront.plugins.shipping.base import ShipmentTracker
from storefront.plugins.shipping.canada_post.client import CanadaPostClient
from storefront.schemas.shipping import ShipmentStatusEvent

logger = logging.getLogger(__name__)

# 16-digit domestic PINs and 13-character S10 international numbers ending in CA
TRACKING_NUMBER_PATTERN = re.compile(r"^(\d{16}|[A-Z]{2}\d{9}CA)$")


class CanadaPostShipmentTracker(ShipmentTracker):

    def __init__(self, client: CanadaPostClient):
        self.client = client

    def is_match(self, tracking_number: str) -> bool:
        if not tracking_number:
            return False
        return bool(TRACKING_NUMBER_PATTERN.match(tracking_number.strip().upper()))

    def get_url(self, tracking_number: str) -> str:
        return settings.CANADA_POST_TRACKING_PAGE_URL.format(tracking_number=tracking_number.strip())

    async def get_shipment_events(self, tracking_number: str) -> List[ShipmentStatusEvent]:
        try:
            occurrences = await self.client.get_tracking_details(tracking_number)
        except CarrierAPIError as e:
            logger.error(f"Canada Post tracking failed for {tracking_number}: {e.message}")
            return []

        events = []
        for occurrence in occurrences:
            location = ", ".join(part for part in (occurrence.event_site, occurrence.event_province) if part)
            events.append(ShipmentStatusEvent(
                event_name=occurrence.event_description,
                location=location or None,
                country_code="CA" if occurrence.event_province else None,
                date=occurrence.event_date,
            ))
        return events
