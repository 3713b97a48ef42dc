"""
Canada Post shipping rate computation method

Realtime rates from the Canada Post rating service:
- weight in kilograms (3 decimals), dimensions in centimetres (1 decimal),
  both rounded half to even
- length is the longest side, height the shortest
- quotes are priced in CAD and converted to the primary store currency
"""
import logging
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import CarrierAPIError, CurrencyNotFoundError, MeasureNotFoundError
from storefront.plugins import register_plugin
from storefront.plugins.shipping.base import ShippingRateComputationMethod, ShippingRateComputationMethodType
from storefront.plugins.shipping.canada_post.client import CanadaPostClient
from storefront.plugins.shipping.canada_post.mailing_scenario import (
    Destination,
    DomesticDestination,
    InternationalDestination,
    MailingScenario,
    ParcelCharacteristics,
    ParcelDimensions,
    UnitedStatesDestination,
)
from storefront.plugins.shipping.canada_post.settings import CanadaPostSettings
from storefront.plugins.shipping.canada_post.tracker import CanadaPostShipmentTracker
from storefront.schemas.shipping import (
    GetShippingOptionRequest,
    GetShippingOptionResponse,
    ShippingAddress,
    ShippingOption,
)
from storefront.services.currency_service import CurrencyService, CurrencySettings
from storefront.services.measure_service import MeasureService, MeasureSettings
from storefront.services.setting_service import SettingService
from storefront.services.shipping_service import ShippingService, ShippingSettings

logger = logging.getLogger(__name__)

CARRIER_CURRENCY_CODE = "CAD"
WEIGHT_SYSTEM_KEYWORD = "kg"
DIMENSION_SYSTEM_KEYWORD = "meters"


def round_half_even(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)


def get_destination(address: ShippingAddress) -> Destination:
    """US and Canada have their own request shapes; every other country is international."""
    country_code = address.country.two_letter_iso_code
    code = country_code.lower()
    if code == "us":
        return UnitedStatesDestination(zip_code=address.zip_postal_code or "")
    if code == "ca":
        return DomesticDestination(postal_code=address.zip_postal_code or "")
    return InternationalDestination(country_code=country_code)


@register_plugin
class CanadaPostComputationMethod(ShippingRateComputationMethod):
    system_name = "Shipping.CanadaPost"
    friendly_name = "Canada Post"
    configuration_path = "/api/admin/plugins/shipping/canada-post/configure"

    settings_class = CanadaPostSettings
    locale_resources = {
        "Plugins.Shipping.CanadaPost.Fields.Api": "API key",
        "Plugins.Shipping.CanadaPost.Fields.Api.Hint": "Specify Canada Post API key.",
        "Plugins.Shipping.CanadaPost.Fields.CustomerNumber": "Customer number",
        "Plugins.Shipping.CanadaPost.Fields.CustomerNumber.Hint": "Specify customer number.",
        "Plugins.Shipping.CanadaPost.Fields.UseSandbox": "Use Sandbox",
        "Plugins.Shipping.CanadaPost.Fields.UseSandbox.Hint": "Check to enable Sandbox (testing environment).",
    }

    def __init__(
        self,
        db: AsyncSession,
        canada_post_settings: CanadaPostSettings,
        currency_service: CurrencyService,
        measure_service: MeasureService,
        shipping_service: ShippingService,
        client: Optional[CanadaPostClient] = None,
    ):
        super().__init__(db)
        self.canada_post_settings = canada_post_settings
        self.currency_service = currency_service
        self.measure_service = measure_service
        self.shipping_service = shipping_service
        self.client = client or CanadaPostClient(
            api_key=canada_post_settings.api_key,
            use_sandbox=canada_post_settings.use_sandbox,
        )

    @classmethod
    async def create(cls, db: AsyncSession, store_id: int = 0) -> "CanadaPostComputationMethod":
        setting_service = SettingService(db)
        return cls(
            db,
            canada_post_settings=await setting_service.load_setting(CanadaPostSettings, store_id),
            currency_service=CurrencyService(db, await setting_service.load_setting(CurrencySettings, store_id)),
            measure_service=MeasureService(db, await setting_service.load_setting(MeasureSettings, store_id)),
            shipping_service=ShippingService(await setting_service.load_setting(ShippingSettings, store_id)),
        )

    @property
    def rate_computation_method_type(self) -> ShippingRateComputationMethodType:
        return ShippingRateComputationMethodType.REALTIME

    @property
    def shipment_tracker(self) -> CanadaPostShipmentTracker:
        return CanadaPostShipmentTracker(self.client)

    def default_settings(self) -> CanadaPostSettings:
        return CanadaPostSettings(use_sandbox=True)

    async def close(self) -> None:
        await self.client.close()

    # ==================== Units and currency ====================

    async def get_weight(self, request: GetShippingOptionRequest) -> Decimal:
        """Parcel weight in kilograms, 3 decimals."""
        kilograms = await self.measure_service.get_measure_weight_by_system_keyword(WEIGHT_SYSTEM_KEYWORD)
        if kilograms is None:
            raise MeasureNotFoundError(
                'CanadaPost shipping service. Could not load "kg" measure weight',
                system_keyword=WEIGHT_SYSTEM_KEYWORD,
            )

        total_weight = self.shipping_service.get_total_weight(request)
        return round_half_even(self.measure_service.convert_from_primary_measure_weight(total_weight, kilograms), 3)

    async def get_dimensions(self, request: GetShippingOptionRequest) -> ParcelDimensions:
        """Parcel length, width, height in centimetres, 1 decimal, longest first."""
        meters = await self.measure_service.get_measure_dimension_by_system_keyword(DIMENSION_SYSTEM_KEYWORD)
        if meters is None:
            raise MeasureNotFoundError(
                'CanadaPost shipping service. Could not load "meter(s)" measure dimension',
                system_keyword=DIMENSION_SYSTEM_KEYWORD,
            )

        shortest, middle, longest = sorted(self.shipping_service.get_dimensions(request.items or []))

        def to_centimetres(value: Decimal) -> Decimal:
            return round_half_even(self.measure_service.convert_from_primary_measure_dimension(value, meters) * 100, 1)

        return ParcelDimensions(
            length=to_centimetres(longest),
            width=to_centimetres(middle),
            height=to_centimetres(shortest),
        )

    async def price_to_primary_store_currency(self, price: Decimal) -> Decimal:
        cad = await self.currency_service.get_currency_by_code(CARRIER_CURRENCY_CODE)
        if cad is None:
            raise CurrencyNotFoundError("CAD currency cannot be loaded", currency_code=CARRIER_CURRENCY_CODE)
        return self.currency_service.convert_to_primary_store_currency(price, cad)

    # ==================== Rates ====================

    async def get_shipping_options(self, request: GetShippingOptionRequest) -> GetShippingOptionResponse:
        """
        Get Canada Post rates for a request.

        Missing request data and carrier failures are returned as response
        errors. Missing "kg"/"meters" measures or CAD currency raise.
        """
        if not request.items:
            return GetShippingOptionResponse(errors=["No shipment items"])
        if request.shipping_address is None:
            return GetShippingOptionResponse(errors=["Shipping address is not set"])
        if request.shipping_address.country is None:
            return GetShippingOptionResponse(errors=["Shipping country is not set"])
        if not request.zip_postal_code_from:
            return GetShippingOptionResponse(errors=["Origin postal code is not set"])

        destination = get_destination(request.shipping_address)
        dimensions = await self.get_dimensions(request)
        weight = await self.get_weight(request)

        scenario = MailingScenario(
            customer_number=self.canada_post_settings.customer_number,
            parcel_characteristics=ParcelCharacteristics(weight=weight, dimensions=dimensions),
            origin_postal_code=request.zip_postal_code_from,
            destination=destination,
        )

        response = GetShippingOptionResponse()
        try:
            quotes = await self.client.get_shipping_services(scenario)
        except CarrierAPIError as e:
            response.add_error(e.message)
            return response

        if not quotes:
            logger.warning(f"Canada Post returned no rates for {destination}")
            response.add_error("No rates returned")
            return response

        for quote in quotes:
            response.shipping_options.append(ShippingOption(
                name=quote.service_name,
                rate=await self.price_to_primary_store_currency(quote.due),
                description=f"{quote.expected_transit_time} days" if quote.expected_transit_time else None,
                shipping_rate_computation_method_system_name=self.system_name,
            ))

        logger.info(
            f"Canada Post quoted {len(response.shipping_options)} options "
            f"to {request.shipping_address.country.two_letter_iso_code}"
        )
        return response
