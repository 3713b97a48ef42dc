"""
Canada Post XML documents

Rating: a mailing-scenario request answered by price-quotes.
Tracking: tracking-detail with significant-events.
Errors from any service come back as a messages document.

Parsing ignores namespaces so rate-v3/v4 and track-v1/v2 replies read the same.
"""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

RATE_NAMESPACE = "http://www.canadapost.ca/ws/ship/rate-v4"


def normalize_postal_code(postal_code: Optional[str]) -> str:
    """Canada Post expects postal codes upper case without spaces."""
    return (postal_code or "").replace(" ", "").upper()


@dataclass
class DomesticDestination:
    postal_code: str


@dataclass
class UnitedStatesDestination:
    zip_code: str


@dataclass
class InternationalDestination:
    country_code: str


Destination = Union[DomesticDestination, UnitedStatesDestination, InternationalDestination]


@dataclass
class ParcelDimensions:
    """Centimetres, one decimal."""
    length: Decimal
    width: Decimal
    height: Decimal


@dataclass
class ParcelCharacteristics:
    """Weight in kilograms, three decimals."""
    weight: Decimal
    dimensions: Optional[ParcelDimensions] = None


@dataclass
class MailingScenario:
    customer_number: str
    parcel_characteristics: ParcelCharacteristics
    origin_postal_code: str
    destination: Destination

    def to_xml(self) -> bytes:
        root = ET.Element("mailing-scenario", xmlns=RATE_NAMESPACE)
        ET.SubElement(root, "customer-number").text = self.customer_number

        parcel = ET.SubElement(root, "parcel-characteristics")
        ET.SubElement(parcel, "weight").text = str(self.parcel_characteristics.weight)
        dimensions = self.parcel_characteristics.dimensions
        if dimensions is not None:
            dims = ET.SubElement(parcel, "dimensions")
            ET.SubElement(dims, "length").text = str(dimensions.length)
            ET.SubElement(dims, "width").text = str(dimensions.width)
            ET.SubElement(dims, "height").text = str(dimensions.height)

        ET.SubElement(root, "origin-postal-code").text = normalize_postal_code(self.origin_postal_code)

        destination = ET.SubElement(root, "destination")
        if isinstance(self.destination, DomesticDestination):
            domestic = ET.SubElement(destination, "domestic")
            ET.SubElement(domestic, "postal-code").text = normalize_postal_code(self.destination.postal_code)
        elif isinstance(self.destination, UnitedStatesDestination):
            united_states = ET.SubElement(destination, "united-states")
            ET.SubElement(united_states, "zip-code").text = (self.destination.zip_code or "").strip()
        else:
            international = ET.SubElement(destination, "international")
            ET.SubElement(international, "country-code").text = self.destination.country_code

        return ET.tostring(root, encoding="utf-8", xml_declaration=True)


@dataclass
class PriceQuote:
    service_code: str
    service_name: str
    due: Decimal
    expected_transit_time: Optional[str] = None


@dataclass
class TrackingOccurrence:
    event_description: str
    event_site: Optional[str] = None
    event_province: Optional[str] = None
    event_date: Optional[datetime] = None


def _text(element: Optional[ET.Element], path: str) -> Optional[str]:
    if element is None:
        return None
    found = element.find(path)
    if found is None or found.text is None:
        return None
    return found.text.strip()


def parse_price_quotes(content: Union[str, bytes]) -> List[PriceQuote]:
    """
    Parse a price-quotes document, keeping the order Canada Post returned.

    Raises ValueError for malformed XML or quotes without a price.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Malformed price-quotes document: {e}") from e

    quotes = []
    for quote in root.findall("{*}price-quote"):
        due = _text(quote, "{*}price-details/{*}due")
        try:
            amount = Decimal(due)
        except (InvalidOperation, TypeError) as e:
            raise ValueError(f"Price quote without a valid due amount: {due!r}") from e

        quotes.append(PriceQuote(
            service_code=_text(quote, "{*}service-code") or "",
            service_name=_text(quote, "{*}service-name") or "",
            due=amount,
            expected_transit_time=_text(quote, "{*}service-standard/{*}expected-transit-time") or None,
        ))
    return quotes


def parse_error_messages(content: Union[str, bytes]) -> List[str]:
    """Descriptions from a messages document; empty when content is not one."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError:
        return []

    descriptions = []
    for message in root.findall("{*}message"):
        description = _text(message, "{*}description")
        if description:
            descriptions.append(description)
    return descriptions


def _parse_event_date(date_text: Optional[str], time_text: Optional[str]) -> Optional[datetime]:
    if not date_text:
        return None
    value = f"{date_text} {time_text}" if time_text else date_text
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    logger.debug(f"Unrecognised Canada Post event date: {value}")
    return None


def parse_tracking_detail(content: Union[str, bytes]) -> List[TrackingOccurrence]:
    """
    Parse a tracking-detail document into its significant events.

    Raises ValueError for malformed XML.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Malformed tracking-detail document: {e}") from e

    occurrences = []
    for occurrence in root.findall("{*}significant-events/{*}occurrence"):
        occurrences.append(TrackingOccurrence(
            event_description=_text(occurrence, "{*}event-description") or "",
            event_site=_text(occurrence, "{*}event-site") or None,
            event_province=_text(occurrence, "{*}event-province") or None,
            event_date=_parse_event_date(
                _text(occurrence, "{*}event-date"),
                _text(occurrence, "{*}event-time"),
            ),
        ))
    return occurrences
