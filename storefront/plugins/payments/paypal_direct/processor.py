"""
PayPal Direct payment processor

Credit card payments entered on the store's own checkout page and sent to
PayPal's REST API. Depending on the transaction mode a payment is only
authorized (captured later from the admin) or authorized and captured at
once.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import PaymentGatewayError
from storefront.plugins import register_plugin
from storefront.plugins.payments.base import PaymentMethod
from storefront.plugins.payments.paypal_direct.client import PayPalClient, format_amount
from storefront.plugins.payments.paypal_direct.schemas import PaymentInfoForm, PaymentInfoModel
from storefront.plugins.payments.paypal_direct.settings import PayPalDirectPaymentSettings, TransactMode
from storefront.plugins.payments.paypal_direct.validators import PaymentInfoValidator
from storefront.schemas.common import SelectListItem, select_matching
from storefront.schemas.payments import (
    CapturePaymentRequest,
    CapturePaymentResult,
    PaymentStatus,
    ProcessPaymentRequest,
    ProcessPaymentResult,
    RefundPaymentRequest,
    RefundPaymentResult,
    VoidPaymentRequest,
    VoidPaymentResult,
)
from storefront.services.setting_service import SettingService

logger = logging.getLogger(__name__)

EXPIRE_YEARS_COUNT = 15

CREDIT_CARD_TYPES = [
    ("Visa", "visa"),
    ("Master card", "MasterCard"),
    ("Discover", "Discover"),
    ("Amex", "Amex"),
]


def credit_card_type_items() -> List[SelectListItem]:
    return [SelectListItem(text=text, value=value) for text, value in CREDIT_CARD_TYPES]


def expire_year_items(today: Optional[datetime] = None) -> List[SelectListItem]:
    """Current year and the following 14."""
    first_year = (today or datetime.now()).year
    return [
        SelectListItem(text=str(year), value=str(year))
        for year in range(first_year, first_year + EXPIRE_YEARS_COUNT)
    ]


def expire_month_items() -> List[SelectListItem]:
    """01..12 as text, 1..12 as value."""
    return [SelectListItem(text=f"{month:02d}", value=str(month)) for month in range(1, 13)]


def _related_resource(payment: Dict, kind: str) -> Dict:
    for transaction in payment.get("transactions", []):
        for resource in transaction.get("related_resources", []):
            if kind in resource:
                return resource[kind]
    return {}


@register_plugin
class PayPalDirectPaymentProcessor(PaymentMethod):
    system_name = "Payments.PayPalDirect"
    friendly_name = "Credit Card (PayPal Direct)"
    configuration_path = "/api/admin/plugins/payments/paypal-direct/configure"

    settings_class = PayPalDirectPaymentSettings
    locale_resources = {
        "Plugins.Payments.PayPalDirect.Fields.ClientId": "Client ID",
        "Plugins.Payments.PayPalDirect.Fields.ClientId.Hint": "Specify client ID.",
        "Plugins.Payments.PayPalDirect.Fields.ClientSecret": "Client secret",
        "Plugins.Payments.PayPalDirect.Fields.ClientSecret.Hint": "Specify secret key.",
        "Plugins.Payments.PayPalDirect.Fields.UseSandbox": "Use Sandbox",
        "Plugins.Payments.PayPalDirect.Fields.UseSandbox.Hint": "Check to enable Sandbox (testing environment).",
        "Plugins.Payments.PayPalDirect.Fields.TransactMode": "Transaction mode",
        "Plugins.Payments.PayPalDirect.Fields.TransactMode.Hint": "Specify transaction mode.",
        "Plugins.Payments.PayPalDirect.Fields.AdditionalFee": "Additional fee",
        "Plugins.Payments.PayPalDirect.Fields.AdditionalFee.Hint": "Enter additional fee to charge your customers.",
        "Plugins.Payments.PayPalDirect.Fields.AdditionalFeePercentage": "Additional fee. Use percentage",
        "Plugins.Payments.PayPalDirect.Fields.AdditionalFeePercentage.Hint": (
            "Determines whether to apply a percentage additional fee to the order total. "
            "If not enabled, a fixed value is used."
        ),
    }

    supports_capture = True
    supports_partial_refund = True
    supports_refund = True
    supports_void = True

    def __init__(
        self,
        db: AsyncSession,
        paypal_settings: PayPalDirectPaymentSettings,
        client: Optional[PayPalClient] = None,
    ):
        super().__init__(db)
        self.paypal_settings = paypal_settings
        self.client = client or PayPalClient(
            client_id=paypal_settings.client_id,
            client_secret=paypal_settings.client_secret,
            use_sandbox=paypal_settings.use_sandbox,
        )

    @classmethod
    async def create(cls, db: AsyncSession, store_id: int = 0) -> "PayPalDirectPaymentProcessor":
        paypal_settings = await SettingService(db).load_setting(PayPalDirectPaymentSettings, store_id)
        return cls(db, paypal_settings)

    def default_settings(self) -> PayPalDirectPaymentSettings:
        return PayPalDirectPaymentSettings(use_sandbox=True, transact_mode=TransactMode.AUTHORIZE)

    async def close(self) -> None:
        await self.client.close()

    # ==================== Checkout form ====================

    async def get_payment_info_model(self, form: Dict[str, Any]) -> PaymentInfoModel:
        """Payment form with its dropdowns, restoring any posted values."""
        posted = PaymentInfoForm.model_validate(form or {})
        model = PaymentInfoModel(
            credit_card_types=credit_card_type_items(),
            expire_years=expire_year_items(),
            expire_months=expire_month_items(),
            card_number=posted.card_number,
            card_code=posted.card_code,
        )

        selected = select_matching(model.credit_card_types, posted.credit_card_type)
        model.credit_card_type = selected.value if selected else None
        selected = select_matching(model.expire_months, posted.expire_month)
        model.expire_month = selected.value if selected else None
        selected = select_matching(model.expire_years, posted.expire_year)
        model.expire_year = selected.value if selected else None
        return model

    async def validate_payment_form(self, form: Dict[str, Any]) -> List[str]:
        validator = PaymentInfoValidator(self.localization_service)
        return await validator.validate(PaymentInfoForm.model_validate(form or {}))

    def get_payment_info(self, form: Dict[str, Any]) -> ProcessPaymentRequest:
        """
        Processing request from a validated form.

        Raises ValueError or TypeError when expiry month or year is not a number.
        """
        posted = PaymentInfoForm.model_validate(form or {})
        return ProcessPaymentRequest(
            credit_card_type=posted.credit_card_type,
            credit_card_number=posted.card_number,
            credit_card_expire_month=int(posted.expire_month),
            credit_card_expire_year=int(posted.expire_year),
            credit_card_cvv2=posted.card_code,
        )

    # ==================== Payment operations ====================

    async def get_additional_handling_fee(self, subtotal: Decimal) -> Decimal:
        fee = self.paypal_settings.additional_fee
        if fee <= 0:
            return Decimal("0")
        if self.paypal_settings.additional_fee_percentage:
            return Decimal(subtotal) * fee / 100
        return fee

    def _payment_body(self, request: ProcessPaymentRequest) -> Dict[str, Any]:
        intent = "authorize" if self.paypal_settings.transact_mode == TransactMode.AUTHORIZE else "sale"
        credit_card = {
            "type": (request.credit_card_type or "").lower(),
            "number": request.credit_card_number,
            "expire_month": request.credit_card_expire_month,
            "expire_year": request.credit_card_expire_year,
            "cvv2": request.credit_card_cvv2,
        }
        if request.credit_card_name:
            first_name, _, last_name = request.credit_card_name.partition(" ")
            credit_card["first_name"] = first_name
            credit_card["last_name"] = last_name

        transaction = {
            "amount": {"total": format_amount(request.order_total), "currency": request.currency_code},
        }
        if request.order_guid:
            transaction["invoice_number"] = request.order_guid

        return {
            "intent": intent,
            "payer": {
                "payment_method": "credit_card",
                "funding_instruments": [{"credit_card": credit_card}],
            },
            "transactions": [transaction],
        }

    async def process_payment(self, request: ProcessPaymentRequest) -> ProcessPaymentResult:
        result = ProcessPaymentResult()
        try:
            payment = await self.client.create_payment(self._payment_body(request))
        except PaymentGatewayError as e:
            logger.error(f"PayPal Direct payment failed: {e.message}")
            result.add_error(e.message)
            return result

        if payment.get("state") != "approved":
            result.add_error(f"Payment was not approved (state: {payment.get('state')})")
            return result

        if self.paypal_settings.transact_mode == TransactMode.AUTHORIZE:
            authorization = _related_resource(payment, "authorization")
            result.authorization_transaction_id = authorization.get("id")
            result.authorization_transaction_result = authorization.get("state")
            result.new_payment_status = PaymentStatus.AUTHORIZED
        else:
            sale = _related_resource(payment, "sale")
            result.capture_transaction_id = sale.get("id")
            result.capture_transaction_result = sale.get("state")
            result.new_payment_status = PaymentStatus.PAID

        logger.info(f"PayPal Direct payment {payment.get('id')} {result.new_payment_status.value}")
        return result

    async def capture(self, request: CapturePaymentRequest) -> CapturePaymentResult:
        result = CapturePaymentResult()
        if request.amount is None:
            result.add_error("Capture amount is not set")
            return result

        try:
            capture = await self.client.capture_authorization(
                request.authorization_transaction_id,
                request.amount,
                request.currency_code,
            )
        except PaymentGatewayError as e:
            logger.error(f"PayPal Direct capture failed: {e.message}")
            result.add_error(e.message)
            return result

        result.capture_transaction_id = capture.get("id")
        result.capture_transaction_result = capture.get("state")
        result.new_payment_status = PaymentStatus.PAID if capture.get("state") == "completed" else PaymentStatus.AUTHORIZED
        return result

    async def refund(self, request: RefundPaymentRequest) -> RefundPaymentResult:
        result = RefundPaymentResult()
        try:
            await self.client.refund_sale(
                request.capture_transaction_id,
                request.amount_to_refund,
                request.currency_code,
            )
        except PaymentGatewayError as e:
            logger.error(f"PayPal Direct refund failed: {e.message}")
            result.add_error(e.message)
            return result

        result.new_payment_status = (
            PaymentStatus.PARTIALLY_REFUNDED if request.is_partial_refund else PaymentStatus.REFUNDED
        )
        return result

    async def void(self, request: VoidPaymentRequest) -> VoidPaymentResult:
        result = VoidPaymentResult()
        try:
            await self.client.void_authorization(request.authorization_transaction_id)
        except PaymentGatewayError as e:
            logger.error(f"PayPal Direct void failed: {e.message}")
            result.add_error(e.message)
            return result

        result.new_payment_status = PaymentStatus.VOIDED
        return result
