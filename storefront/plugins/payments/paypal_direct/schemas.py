"""
PayPal Direct form models

ConfigurationModel is the admin configuration form. PaymentInfoForm is the
raw checkout form as submitted; PaymentInfoModel is what the checkout
payment step renders.
"""
from decimal import Decimal
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.plugins.payments.paypal_direct.settings import PayPalDirectPaymentSettings, TransactMode
from storefront.schemas.common import SelectListItem, StoreScopedConfigurationModel


def transact_mode_select_list(selected: TransactMode) -> List[SelectListItem]:
    return [
        SelectListItem(text=mode.display_name, value=str(mode.value), selected=mode == selected)
        for mode in TransactMode
    ]


class ConfigurationModel(StoreScopedConfigurationModel):
    setting_field_aliases: ClassVar[Dict[str, str]] = {"transact_mode_id": "transact_mode"}

    client_id: str = ""
    client_id_override_for_store: bool = False

    client_secret: str = ""
    client_secret_override_for_store: bool = False

    use_sandbox: bool = False
    use_sandbox_override_for_store: bool = False

    transact_mode_id: int = TransactMode.AUTHORIZE.value
    transact_mode_id_override_for_store: bool = False
    transact_mode_values: List[SelectListItem] = []

    additional_fee: Decimal = Decimal("0")
    additional_fee_override_for_store: bool = False

    additional_fee_percentage: bool = False
    additional_fee_percentage_override_for_store: bool = False

    @field_validator("transact_mode_id")
    @classmethod
    def validate_transact_mode(cls, v):
        if v not in {mode.value for mode in TransactMode}:
            raise ValueError(f"Unknown transaction mode: {v}")
        return v

    @classmethod
    def from_settings(cls, settings: PayPalDirectPaymentSettings) -> "ConfigurationModel":
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            use_sandbox=settings.use_sandbox,
            transact_mode_id=settings.transact_mode.value,
            transact_mode_values=transact_mode_select_list(settings.transact_mode),
            additional_fee=settings.additional_fee,
            additional_fee_percentage=settings.additional_fee_percentage,
        )

    def apply_to(self, settings: PayPalDirectPaymentSettings) -> None:
        settings.client_id = self.client_id
        settings.client_secret = self.client_secret
        settings.use_sandbox = self.use_sandbox
        settings.transact_mode = TransactMode(self.transact_mode_id)
        settings.additional_fee = self.additional_fee
        settings.additional_fee_percentage = self.additional_fee_percentage


class PaymentInfoForm(BaseModel):
    """Checkout payment form fields exactly as posted."""
    model_config = ConfigDict(extra="ignore")

    credit_card_type: Optional[str] = None
    card_number: Optional[str] = None
    card_code: Optional[str] = None
    expire_month: Optional[str] = None
    expire_year: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)


class PaymentInfoModel(BaseModel):
    credit_card_types: List[SelectListItem] = []
    credit_card_type: Optional[str] = None

    card_number: Optional[str] = None
    card_code: Optional[str] = None

    expire_months: List[SelectListItem] = []
    expire_month: Optional[str] = None

    expire_years: List[SelectListItem] = []
    expire_year: Optional[str] = None


class ValidatePaymentFormResponse(BaseModel):
    warnings: List[str] = []

    @property
    def is_valid(self) -> bool:
        return not self.warnings


class ProcessPaymentBody(BaseModel):
    """Checkout submission: the payment form plus the order being paid."""
    form: Dict[str, Optional[str]] = {}
    order_total: Decimal = Field(..., ge=0)
    currency_code: str = Field("USD", min_length=3, max_length=3)
    order_guid: Optional[str] = None
    store_id: int = 0

    @field_validator("currency_code")
    @classmethod
    def validate_currency_code(cls, v):
        return v.upper()
