"""
Tests for the Canada Post shipping rate computation plugin.
"""
import base64
import pytest
import xml.etree.ElementTree as ET
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx

from storefront.core.exceptions import CarrierAPIError, CurrencyNotFoundError, MeasureNotFoundError
from storefront.models.directory import Currency, MeasureDimension, MeasureWeight
from storefront.plugins.shipping.base import ShippingRateComputationMethodType
from storefront.plugins.shipping.canada_post.client import CanadaPostClient, RATING_PATH
from storefront.plugins.shipping.canada_post.computation import (
    CanadaPostComputationMethod,
    get_destination,
    round_half_even,
)
from storefront.plugins.shipping.canada_post.mailing_scenario import (
    DomesticDestination,
    InternationalDestination,
    MailingScenario,
    ParcelCharacteristics,
    ParcelDimensions,
    PriceQuote,
    TrackingOccurrence,
    UnitedStatesDestination,
    parse_error_messages,
    parse_price_quotes,
    parse_tracking_detail,
)
from storefront.plugins.shipping.canada_post.settings import CanadaPostSettings
from storefront.plugins.shipping.canada_post.tracker import CanadaPostShipmentTracker
from storefront.schemas.shipping import Country, GetShippingOptionRequest, ShippingAddress
from storefront.services.currency_service import CurrencyService, CurrencySettings
from storefront.services.measure_service import MeasureService, MeasureSettings
from storefront.services.shipping_service import ShippingService, ShippingSettings

PRICE_QUOTES_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<price-quotes xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <price-quote>
    <service-code>DOM.EP</service-code>
    <service-name>Expedited Parcel</service-name>
    <price-details><due>12.50</due></price-details>
    <service-standard><expected-transit-time>2</expected-transit-time></service-standard>
  </price-quote>
  <price-quote>
    <service-code>DOM.RP</service-code>
    <service-name>Regular Parcel</service-name>
    <price-details><due>10.00</due></price-details>
  </price-quote>
</price-quotes>
"""

MESSAGES_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<messages xmlns="http://www.canadapost.ca/ws/messages">
  <message>
    <code>9111</code>
    <description>Destination Postal Code/State Name/ Country is illegal.</description>
  </message>
  <message>
    <code>1002</code>
    <description>Weight is missing.</description>
  </message>
</messages>
"""

TRACKING_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<tracking-detail xmlns="http://www.canadapost.ca/ws/track-v2">
  <pin>1371134583769923</pin>
  <significant-events>
    <occurrence>
      <event-date>2024-03-05</event-date>
      <event-time>14:22:10</event-time>
      <event-description>Delivered</event-description>
      <event-site>OTTAWA</event-site>
      <event-province>ON</event-province>
    </occurrence>
    <occurrence>
      <event-date>2024-03-04</event-date>
      <event-description>Electronic information submitted by shipper</event-description>
    </occurrence>
  </significant-events>
</tracking-detail>
"""


def seed_directory(db, kg=True, meters=True, cad=True):
    """Primary units (USD, lb, inches) plus the kg, meters and CAD rows the plugin looks up."""
    db.add(Currency(id=1, name="US Dollar", currency_code="USD", rate=Decimal("1"), display_order=1))
    db.add(MeasureWeight(id=2, name="lb(s)", system_keyword="lb", ratio=Decimal("1"), display_order=2))
    db.add(MeasureDimension(id=1, name="inch(es)", system_keyword="inches", ratio=Decimal("1"), display_order=1))
    if kg:
        db.add(MeasureWeight(id=3, name="kg(s)", system_keyword="kg", ratio=Decimal("0.45359237"), display_order=3))
    if meters:
        db.add(MeasureDimension(id=3, name="meter(s)", system_keyword="meters", ratio=Decimal("0.0254"),
                                display_order=3))
    if cad:
        db.add(Currency(id=2, name="Canadian Dollar", currency_code="CAD", rate=Decimal("1.25"), display_order=2))


def make_request(items, country_code="CA", zip_postal_code="k1a 0b1", origin="M5V 3L9"):
    return GetShippingOptionRequest(
        items=items,
        shipping_address=ShippingAddress(
            zip_postal_code=zip_postal_code,
            country=Country(name="Country", two_letter_iso_code=country_code),
        ),
        zip_postal_code_from=origin,
    )


@pytest.fixture
def fake_client():
    client = AsyncMock(spec=CanadaPostClient)
    client.get_shipping_services.return_value = [
        PriceQuote(service_code="DOM.EP", service_name="Expedited Parcel", due=Decimal("12.50"),
                   expected_transit_time="2"),
        PriceQuote(service_code="DOM.RP", service_name="Regular Parcel", due=Decimal("10.00")),
    ]
    return client


@pytest.fixture
def make_method(memory_db, fake_client):
    def _make(use_cube_root_method=False):
        return CanadaPostComputationMethod(
            memory_db,
            canada_post_settings=CanadaPostSettings(api_key="user:pass", customer_number="0001234567"),
            currency_service=CurrencyService(memory_db, CurrencySettings(primary_store_currency_id=1)),
            measure_service=MeasureService(memory_db, MeasureSettings(base_dimension_id=1, base_weight_id=2)),
            shipping_service=ShippingService(ShippingSettings(use_cube_root_method=use_cube_root_method)),
            client=fake_client,
        )
    return _make


class TestRounding:

    def test_half_even_to_three_places(self):
        assert round_half_even(Decimal("0.0125"), 3) == Decimal("0.012")
        assert round_half_even(Decimal("0.0135"), 3) == Decimal("0.014")

    def test_half_even_to_one_place(self):
        assert round_half_even(Decimal("2.25"), 1) == Decimal("2.2")
        assert round_half_even(Decimal("2.35"), 1) == Decimal("2.4")


class TestDestination:

    def test_united_states(self):
        address = ShippingAddress(zip_postal_code="10001", country=Country(two_letter_iso_code="US"))
        assert get_destination(address) == UnitedStatesDestination(zip_code="10001")

    def test_canada_is_domestic(self):
        address = ShippingAddress(zip_postal_code="K1A 0B1", country=Country(two_letter_iso_code="ca"))
        assert get_destination(address) == DomesticDestination(postal_code="K1A 0B1")

    def test_other_countries_are_international(self):
        address = ShippingAddress(zip_postal_code="75001", country=Country(two_letter_iso_code="FR"))
        assert get_destination(address) == InternationalDestination(country_code="FR")


class TestPreconditions:

    @pytest.mark.asyncio
    async def test_no_items(self, make_method, sample_items):
        request = make_request(sample_items)
        request.items = []
        response = await make_method().get_shipping_options(request)
        assert response.errors == ["No shipment items"]
        assert response.shipping_options == []

    @pytest.mark.asyncio
    async def test_no_shipping_address(self, make_method, sample_items):
        request = make_request(sample_items)
        request.shipping_address = None
        response = await make_method().get_shipping_options(request)
        assert response.errors == ["Shipping address is not set"]

    @pytest.mark.asyncio
    async def test_no_country(self, make_method, sample_items):
        request = make_request(sample_items)
        request.shipping_address.country = None
        response = await make_method().get_shipping_options(request)
        assert response.errors == ["Shipping country is not set"]

    @pytest.mark.asyncio
    async def test_no_origin_postal_code(self, make_method, sample_items):
        response = await make_method().get_shipping_options(make_request(sample_items, origin=""))
        assert response.errors == ["Origin postal code is not set"]

    @pytest.mark.asyncio
    async def test_items_checked_before_address(self, make_method, fake_client):
        response = await make_method().get_shipping_options(GetShippingOptionRequest())
        assert response.errors == ["No shipment items"]
        fake_client.get_shipping_services.assert_not_called()


class TestGetShippingOptions:

    @pytest.mark.asyncio
    async def test_options_converted_and_ordered(self, memory_db, make_method, sample_items):
        seed_directory(memory_db)
        response = await make_method().get_shipping_options(make_request(sample_items))

        assert response.success
        assert [o.name for o in response.shipping_options] == ["Expedited Parcel", "Regular Parcel"]
        assert response.shipping_options[0].rate == Decimal("10")  # 12.50 CAD / 1.25
        assert response.shipping_options[1].rate == Decimal("8")
        assert response.shipping_options[0].description == "2 days"
        assert response.shipping_options[1].description is None
        assert all(
            o.shipping_rate_computation_method_system_name == "Shipping.CanadaPost"
            for o in response.shipping_options
        )

    @pytest.mark.asyncio
    async def test_scenario_weight_and_dimensions(self, memory_db, make_method, fake_client, sample_items):
        seed_directory(memory_db)
        await make_method().get_shipping_options(make_request(sample_items))

        scenario = fake_client.get_shipping_services.call_args.args[0]
        assert scenario.customer_number == "0001234567"
        # 3.5 lb = 1.587573295 kg
        assert scenario.parcel_characteristics.weight == Decimal("1.588")
        # stacked 30 x 8 x 8 inches
        assert scenario.parcel_characteristics.dimensions == ParcelDimensions(
            length=Decimal("76.2"), width=Decimal("20.3"), height=Decimal("20.3"),
        )
        assert scenario.destination == DomesticDestination(postal_code="k1a 0b1")

    @pytest.mark.asyncio
    async def test_dimensions_sorted_longest_first(self, memory_db, make_method, fake_client):
        from storefront.schemas.shipping import PackageItem

        seed_directory(memory_db)
        item = PackageItem(weight=Decimal("1"), length=Decimal("2"), width=Decimal("10"), height=Decimal("5"))
        await make_method().get_shipping_options(make_request([item]))

        dims = fake_client.get_shipping_services.call_args.args[0].parcel_characteristics.dimensions
        assert dims.length >= dims.width >= dims.height
        assert dims.length == Decimal("25.4")

    @pytest.mark.asyncio
    async def test_carrier_error_becomes_response_error(self, memory_db, make_method, fake_client, sample_items):
        seed_directory(memory_db)
        fake_client.get_shipping_services.side_effect = CarrierAPIError("Weight is missing.", status_code=400)

        response = await make_method().get_shipping_options(make_request(sample_items))

        assert response.errors == ["Weight is missing."]
        assert response.shipping_options == []

    @pytest.mark.asyncio
    async def test_missing_kg_measure_raises(self, memory_db, make_method, sample_items):
        seed_directory(memory_db, kg=False)
        with pytest.raises(MeasureNotFoundError) as exc_info:
            await make_method().get_shipping_options(make_request(sample_items))
        assert '"kg" measure weight' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_meters_measure_raises(self, memory_db, make_method, sample_items):
        seed_directory(memory_db, meters=False)
        with pytest.raises(MeasureNotFoundError) as exc_info:
            await make_method().get_shipping_options(make_request(sample_items))
        assert '"meter(s)" measure dimension' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_cad_raises(self, memory_db, make_method, sample_items):
        seed_directory(memory_db, cad=False)
        with pytest.raises(CurrencyNotFoundError) as exc_info:
            await make_method().get_shipping_options(make_request(sample_items))
        assert exc_info.value.message == "CAD currency cannot be loaded"

    @pytest.mark.asyncio
    async def test_empty_quote_list_becomes_response_error(self, memory_db, make_method, fake_client, sample_items):
        seed_directory(memory_db)
        fake_client.get_shipping_services.return_value = []

        response = await make_method().get_shipping_options(make_request(sample_items))

        assert response.errors == ["No rates returned"]
        assert response.shipping_options == []


HALF_EVEN_WEIGHTS = ["0.0005", "0.0015", "0.0025", "0.0035", "1.2345", "1.2355", "3.5"]


class TestParcelWeight:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ratio", [Decimal("1"), Decimal("0.45359237")])
    async def test_weight_never_decreases_and_repeats(self, memory_db, make_method, ratio):
        from storefront.schemas.shipping import PackageItem

        seed_directory(memory_db, kg=False)
        memory_db.add(MeasureWeight(id=3, name="kg(s)", system_keyword="kg", ratio=ratio, display_order=3))
        method = make_method()

        weights = []
        for pounds in HALF_EVEN_WEIGHTS:
            request = make_request([PackageItem(weight=Decimal(pounds))])
            first = await method.get_weight(request)
            assert await method.get_weight(request) == first
            weights.append(first)

        assert weights == sorted(weights)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pounds,expected", [
        ("0.0005", "0.000"),
        ("0.0015", "0.002"),
        ("0.0025", "0.002"),
        ("0.0035", "0.004"),
        ("1.2345", "1.234"),
        ("1.2355", "1.236"),
    ])
    async def test_half_even_boundaries(self, memory_db, make_method, pounds, expected):
        from storefront.schemas.shipping import PackageItem

        seed_directory(memory_db, kg=False)
        memory_db.add(MeasureWeight(id=3, name="kg(s)", system_keyword="kg", ratio=Decimal("1"), display_order=3))

        weight = await make_method().get_weight(make_request([PackageItem(weight=Decimal(pounds))]))

        assert weight == Decimal(expected)


class TestPluginMetadata:

    @pytest.mark.asyncio
    async def test_realtime_without_fixed_rate(self, make_method, sample_items):
        method = make_method()
        assert method.rate_computation_method_type == ShippingRateComputationMethodType.REALTIME
        assert await method.get_fixed_rate(make_request(sample_items)) is None

    def test_default_settings_use_sandbox(self, make_method):
        assert make_method().default_settings() == CanadaPostSettings(use_sandbox=True)

    def test_tracker_uses_plugin_client(self, make_method, fake_client):
        tracker = make_method().shipment_tracker
        assert isinstance(tracker, CanadaPostShipmentTracker)
        assert tracker.client is fake_client


class TestMailingScenario:

    def test_to_xml(self):
        scenario = MailingScenario(
            customer_number="0001234567",
            parcel_characteristics=ParcelCharacteristics(
                weight=Decimal("1.588"),
                dimensions=ParcelDimensions(length=Decimal("76.2"), width=Decimal("20.3"), height=Decimal("5.1")),
            ),
            origin_postal_code="m5v 3l9",
            destination=DomesticDestination(postal_code="K1A 0B1"),
        )
        root = ET.fromstring(scenario.to_xml())
        ns = {"r": "http://www.canadapost.ca/ws/ship/rate-v4"}

        assert root.tag == "{http://www.canadapost.ca/ws/ship/rate-v4}mailing-scenario"
        assert root.find("r:customer-number", ns).text == "0001234567"
        assert root.find("r:parcel-characteristics/r:weight", ns).text == "1.588"
        assert root.find("r:parcel-characteristics/r:dimensions/r:length", ns).text == "76.2"
        assert root.find("r:parcel-characteristics/r:dimensions/r:height", ns).text == "5.1"
        assert root.find("r:origin-postal-code", ns).text == "M5V3L9"
        assert root.find("r:destination/r:domestic/r:postal-code", ns).text == "K1A0B1"

    def test_international_destination(self):
        scenario = MailingScenario(
            customer_number="1",
            parcel_characteristics=ParcelCharacteristics(weight=Decimal("1.000")),
            origin_postal_code="M5V3L9",
            destination=InternationalDestination(country_code="FR"),
        )
        root = ET.fromstring(scenario.to_xml())
        assert root.find("{*}destination/{*}international/{*}country-code").text == "FR"
        assert root.find("{*}parcel-characteristics/{*}dimensions") is None

    def test_parse_price_quotes_keeps_order(self):
        quotes = parse_price_quotes(PRICE_QUOTES_XML)
        assert [q.service_code for q in quotes] == ["DOM.EP", "DOM.RP"]
        assert quotes[0].due == Decimal("12.50")
        assert quotes[0].expected_transit_time == "2"
        assert quotes[1].expected_transit_time is None

    def test_parse_price_quotes_malformed(self):
        with pytest.raises(ValueError):
            parse_price_quotes(b"<price-quotes>")

    def test_parse_error_messages(self):
        assert parse_error_messages(MESSAGES_XML) == [
            "Destination Postal Code/State Name/ Country is illegal.",
            "Weight is missing.",
        ]
        assert parse_error_messages(b"not xml") == []

    def test_parse_tracking_detail(self):
        occurrences = parse_tracking_detail(TRACKING_XML)
        assert occurrences[0] == TrackingOccurrence(
            event_description="Delivered",
            event_site="OTTAWA",
            event_province="ON",
            event_date=datetime(2024, 3, 5, 14, 22, 10),
        )
        assert occurrences[1].event_date == datetime(2024, 3, 4)
        assert occurrences[1].event_site is None


class TestCanadaPostClient:

    @pytest.mark.asyncio
    async def test_get_shipping_services(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, content=PRICE_QUOTES_XML)

        client = CanadaPostClient("user:pass", use_sandbox=True, transport=httpx.MockTransport(handler))
        scenario = MailingScenario(
            customer_number="1",
            parcel_characteristics=ParcelCharacteristics(weight=Decimal("1.000")),
            origin_postal_code="M5V3L9",
            destination=UnitedStatesDestination(zip_code="10001"),
        )
        try:
            quotes = await client.get_shipping_services(scenario)
        finally:
            await client.close()

        request = seen["request"]
        assert str(request.url) == f"https://ct.soa-gw.canadapost.ca{RATING_PATH}"
        assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"user:pass").decode()
        assert request.headers["Accept"] == "application/vnd.cpc.ship.rate-v4+xml"
        assert b"<zip-code>10001</zip-code>" in request.content
        assert [q.service_name for q in quotes] == ["Expedited Parcel", "Regular Parcel"]

    @pytest.mark.asyncio
    async def test_error_reply_joins_messages(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(400, content=MESSAGES_XML))
        client = CanadaPostClient("user:pass", transport=transport)
        scenario = MailingScenario("1", ParcelCharacteristics(weight=Decimal("0")), "M5V3L9",
                                   DomesticDestination("K1A0B1"))

        with pytest.raises(CarrierAPIError) as exc_info:
            await client.get_shipping_services(scenario)
        await client.close()

        assert exc_info.value.message == (
            "Destination Postal Code/State Name/ Country is illegal.; Weight is missing."
        )
        assert exc_info.value.details["status_code"] == 400

    @pytest.mark.asyncio
    async def test_error_reply_without_messages(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, content=b""))
        client = CanadaPostClient("user:pass", transport=transport)

        with pytest.raises(CarrierAPIError) as exc_info:
            await client.get_tracking_details("1371134583769923")
        await client.close()

        assert exc_info.value.message == "Canada Post API error (HTTP 503)"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = CanadaPostClient("user:pass", transport=httpx.MockTransport(handler))
        with pytest.raises(CarrierAPIError) as exc_info:
            await client.get_tracking_details("1371134583769923")
        await client.close()

        assert exc_info.value.message.startswith("Network error")


class TestShipmentTracker:

    @pytest.mark.parametrize("tracking_number,expected", [
        ("1371134583769923", True),
        ("ee123456789ca", True),
        ("EE123456789US", False),
        ("1Z999AA10123456784", False),
        ("", False),
    ])
    def test_is_match(self, tracking_number, expected):
        assert CanadaPostShipmentTracker(AsyncMock()).is_match(tracking_number) is expected

    def test_get_url(self):
        url = CanadaPostShipmentTracker(AsyncMock()).get_url(" 1371134583769923 ")
        assert url.endswith("trackingNumber=1371134583769923")

    @pytest.mark.asyncio
    async def test_get_shipment_events(self):
        client = AsyncMock()
        client.get_tracking_details.return_value = parse_tracking_detail(TRACKING_XML)

        events = await CanadaPostShipmentTracker(client).get_shipment_events("1371134583769923")

        assert events[0].event_name == "Delivered"
        assert events[0].location == "OTTAWA, ON"
        assert events[0].country_code == "CA"
        assert events[1].location is None
        assert events[1].country_code is None

    @pytest.mark.asyncio
    async def test_get_shipment_events_on_error(self):
        client = AsyncMock()
        client.get_tracking_details.side_effect = CarrierAPIError("PIN not found", status_code=404)

        assert await CanadaPostShipmentTracker(client).get_shipment_events("1371134583769923") == []
