"""
Shipping rate computation method interface

Realtime methods call a carrier API for every quote; offline methods
compute rates locally (fixed rate, by weight, ...).
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from storefront.plugins.base import BasePlugin
from storefront.schemas.shipping import (
    GetShippingOptionRequest,
    GetShippingOptionResponse,
    ShipmentStatusEvent,
)


class ShippingRateComputationMethodType(str, Enum):
    OFFLINE = "offline"
    REALTIME = "realtime"


class ShipmentTracker(ABC):
    """Tracking support of a shipping method."""

    def is_match(self, tracking_number: str) -> bool:
        """Whether the tracking number belongs to this carrier. Unknown by default."""
        return False

    @abstractmethod
    def get_url(self, tracking_number: str) -> str:
        """Public tracking page URL for a shipment."""
        pass

    @abstractmethod
    async def get_shipment_events(self, tracking_number: str) -> List[ShipmentStatusEvent]:
        """Tracking events for a shipment, empty when unavailable."""
        pass


class ShippingRateComputationMethod(BasePlugin):
    group = "Shipping"

    @property
    @abstractmethod
    def rate_computation_method_type(self) -> ShippingRateComputationMethodType:
        pass

    @property
    def shipment_tracker(self) -> Optional[ShipmentTracker]:
        return None

    @abstractmethod
    async def get_shipping_options(self, request: GetShippingOptionRequest) -> GetShippingOptionResponse:
        """Shipping options for a request, or errors explaining why there are none."""
        pass

    async def get_fixed_rate(self, request: GetShippingOptionRequest) -> Optional[Decimal]:
        """Rate known before checkout, None when the method has no fixed rate."""
        return None
