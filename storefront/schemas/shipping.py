"""
Shipping Schemas

Pydantic models for shipping rate requests, responses and tracking events.
Weights and dimensions on package items are in the primary measure
weight/dimension (see MeasureSettings).
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Country(BaseModel):
    name: str = ""
    two_letter_iso_code: str = Field(..., min_length=2, max_length=2)


class ShippingAddress(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address1: Optional[str] = None
    city: Optional[str] = None
    state_province: Optional[str] = None
    zip_postal_code: Optional[str] = None
    country: Optional[Country] = None


class PackageItem(BaseModel):
    """A cart line to be shipped."""
    product_name: Optional[str] = None
    quantity: int = Field(1, ge=1)
    weight: Decimal = Field(Decimal("0"), ge=0)
    length: Decimal = Field(Decimal("0"), ge=0)
    width: Decimal = Field(Decimal("0"), ge=0)
    height: Decimal = Field(Decimal("0"), ge=0)
    is_free_shipping: bool = False
    is_ship_enabled: bool = True


class GetShippingOptionRequest(BaseModel):
    """
    Input to a shipping rate computation method.

    items and shipping_address are optional so that a method can report
    missing data as a response error instead of a validation failure.
    """
    items: Optional[List[PackageItem]] = None
    shipping_address: Optional[ShippingAddress] = None
    zip_postal_code_from: Optional[str] = None
    country_from: Optional[Country] = None
    store_id: int = 0


class ShippingOption(BaseModel):
    name: str
    rate: Decimal
    description: Optional[str] = None
    shipping_rate_computation_method_system_name: Optional[str] = None


class GetShippingOptionResponse(BaseModel):
    shipping_options: List[ShippingOption] = []
    errors: List[str] = []

    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, error: str) -> None:
        self.errors.append(error)


class ShipmentStatusEvent(BaseModel):
    """One tracking scan for a shipment."""
    event_name: str
    location: Optional[str] = None
    country_code: Optional[str] = None
    date: Optional[datetime] = None


class TrackingResponse(BaseModel):
    tracking_number: str
    url: str
    events: List[ShipmentStatusEvent] = []

    @field_validator("tracking_number")
    @classmethod
    def strip_tracking_number(cls, v):
        return v.strip()
