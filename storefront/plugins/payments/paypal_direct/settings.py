"""
PayPal Direct plugin settings, persisted per store through SettingService.
"""
from decimal import Decimal
from enum import IntEnum

from storefront.services.setting_service import SettingsBase


class TransactMode(IntEnum):
    AUTHORIZE = 1
    AUTHORIZE_AND_CAPTURE = 2

    @property
    def display_name(self) -> str:
        return "Authorize" if self is TransactMode.AUTHORIZE else "Authorize and capture"


class PayPalDirectPaymentSettings(SettingsBase):
    client_id: str = ""
    client_secret: str = ""
    use_sandbox: bool = False
    transact_mode: TransactMode = TransactMode.AUTHORIZE
    additional_fee: Decimal = Decimal("0")
    # Fee is a percentage of the order subtotal instead of a flat amount
    additional_fee_percentage: bool = False
