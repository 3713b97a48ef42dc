# Services layer for business logic
from storefront.services.setting_service import SettingService, SettingsBase, settings_cache
from storefront.services.store_service import StoreService
from storefront.services.localization_service import LocalizationService
from storefront.services.currency_service import CurrencyService, CurrencySettings
from storefront.services.measure_service import MeasureService, MeasureSettings
from storefront.services.shipping_service import ShippingService, ShippingSettings, Dimensions
