"""
Payment method interface

Gateway failures are reported through the result objects' error lists;
callers decide whether to retry or show the message.
"""
from abc import abstractmethod
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List

from storefront.plugins.base import BasePlugin
from storefront.schemas.payments import (
    CapturePaymentRequest,
    CapturePaymentResult,
    ProcessPaymentRequest,
    ProcessPaymentResult,
    RefundPaymentRequest,
    RefundPaymentResult,
    VoidPaymentRequest,
    VoidPaymentResult,
)


class PaymentMethodType(str, Enum):
    STANDARD = "standard"
    REDIRECTION = "redirection"
    BUTTON = "button"


class PaymentMethod(BasePlugin):
    group = "Payments"

    payment_method_type: PaymentMethodType = PaymentMethodType.STANDARD
    supports_capture: bool = False
    supports_partial_refund: bool = False
    supports_refund: bool = False
    supports_void: bool = False

    @abstractmethod
    async def get_payment_info_model(self, form: Dict[str, Any]) -> Any:
        """Model for the checkout payment form, restoring submitted values."""
        pass

    @abstractmethod
    async def validate_payment_form(self, form: Dict[str, Any]) -> List[str]:
        """Warnings for a submitted payment form, empty when valid."""
        pass

    @abstractmethod
    def get_payment_info(self, form: Dict[str, Any]) -> ProcessPaymentRequest:
        """Build the processing request from a validated payment form."""
        pass

    @abstractmethod
    async def get_additional_handling_fee(self, subtotal: Decimal) -> Decimal:
        pass

    @abstractmethod
    async def process_payment(self, request: ProcessPaymentRequest) -> ProcessPaymentResult:
        pass

    async def capture(self, request: CapturePaymentRequest) -> CapturePaymentResult:
        result = CapturePaymentResult()
        result.add_error("Capture method not supported")
        return result

    async def refund(self, request: RefundPaymentRequest) -> RefundPaymentResult:
        result = RefundPaymentResult()
        result.add_error("Refund method not supported")
        return result

    async def void(self, request: VoidPaymentRequest) -> VoidPaymentResult:
        result = VoidPaymentResult()
        result.add_error("Void method not supported")
        return result
