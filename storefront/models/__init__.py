from storefront.models.setting import Setting
from storefront.models.store import Store
from storefront.models.directory import Currency, MeasureWeight, MeasureDimension
from storefront.models.localization import LocaleStringResource
from storefront.models.customer import Customer, CustomerRole
from storefront.models.campaign import Campaign

__all__ = [
    "Setting",
    "Store",
    "Currency",
    "MeasureWeight",
    "MeasureDimension",
    "LocaleStringResource",
    "Customer",
    "CustomerRole",
    "Campaign",
]
