"""
Shipping Service

Package aggregates used by rate computation methods: total weight and the
bounding dimensions of a shipment. All values stay in the primary measure
weight/dimension; carriers convert to their own units.
"""
import logging
from decimal import Decimal
from typing import List, NamedTuple

from storefront.schemas.shipping import GetShippingOptionRequest, PackageItem
from storefront.services.setting_service import SettingsBase

logger = logging.getLogger(__name__)


class ShippingSettings(SettingsBase):
    use_cube_root_method: bool = True
    ignore_free_shipped_items_weight: bool = False


class Dimensions(NamedTuple):
    length: Decimal
    width: Decimal
    height: Decimal


class ShippingService:

    def __init__(self, shipping_settings: ShippingSettings):
        self.shipping_settings = shipping_settings

    @staticmethod
    def _shippable(items: List[PackageItem]) -> List[PackageItem]:
        return [item for item in items if item.is_ship_enabled]

    def get_total_weight(self, request: GetShippingOptionRequest) -> Decimal:
        """Sum of item weight × quantity."""
        total = Decimal("0")
        for item in self._shippable(request.items or []):
            if item.is_free_shipping and self.shipping_settings.ignore_free_shipped_items_weight:
                continue
            total += item.weight * item.quantity
        return total

    def get_dimensions(self, items: List[PackageItem]) -> Dimensions:
        """
        Bounding dimensions of the shipment.

        A single item shipped once keeps its own dimensions. Otherwise either
        a cube of the same total volume (use_cube_root_method) or the items
        stacked: max length, max width, summed height.
        """
        items = self._shippable(items)
        if not items:
            return Dimensions(Decimal("0"), Decimal("0"), Decimal("0"))

        if len(items) == 1 and items[0].quantity == 1:
            item = items[0]
            return Dimensions(item.length, item.width, item.height)

        if self.shipping_settings.use_cube_root_method:
            total_volume = sum(
                (item.length * item.width * item.height * item.quantity for item in items),
                Decimal("0"),
            )
            side = Decimal(str(float(total_volume) ** (1.0 / 3.0))) if total_volume > 0 else Decimal("0")
            return Dimensions(side, side, side)

        return Dimensions(
            length=max(item.length for item in items),
            width=max(item.width for item in items),
            height=sum((item.height * item.quantity for item in items), Decimal("0")),
        )
