"""
Payment Schemas

Requests and results passed between checkout and payment methods.
Results collect gateway errors instead of raising.
"""
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    AUTHORIZED = "Authorized"
    PAID = "Paid"
    PARTIALLY_REFUNDED = "PartiallyRefunded"
    REFUNDED = "Refunded"
    VOIDED = "Voided"


class ProcessPaymentRequest(BaseModel):
    """Card data and order totals for one payment attempt. Never persisted."""
    store_id: int = 0
    customer_id: Optional[int] = None
    order_guid: Optional[str] = None
    order_total: Decimal = Field(Decimal("0"), ge=0)
    currency_code: str = "USD"

    credit_card_type: Optional[str] = None
    credit_card_name: Optional[str] = None
    credit_card_number: Optional[str] = None
    credit_card_expire_month: int = 0
    credit_card_expire_year: int = 0
    credit_card_cvv2: Optional[str] = None


class ErrorCollectingResult(BaseModel):
    errors: List[str] = []

    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, error: str) -> None:
        self.errors.append(error)


class ProcessPaymentResult(ErrorCollectingResult):
    new_payment_status: PaymentStatus = PaymentStatus.PENDING
    authorization_transaction_id: Optional[str] = None
    authorization_transaction_result: Optional[str] = None
    capture_transaction_id: Optional[str] = None
    capture_transaction_result: Optional[str] = None


class CapturePaymentRequest(BaseModel):
    authorization_transaction_id: str
    amount: Optional[Decimal] = None
    currency_code: str = "USD"
    store_id: int = 0


class CapturePaymentResult(ErrorCollectingResult):
    new_payment_status: PaymentStatus = PaymentStatus.PENDING
    capture_transaction_id: Optional[str] = None
    capture_transaction_result: Optional[str] = None


class RefundPaymentRequest(BaseModel):
    capture_transaction_id: str
    amount_to_refund: Decimal = Field(..., gt=0)
    is_partial_refund: bool = False
    currency_code: str = "USD"
    store_id: int = 0


class RefundPaymentResult(ErrorCollectingResult):
    new_payment_status: PaymentStatus = PaymentStatus.PENDING


class VoidPaymentRequest(BaseModel):
    authorization_transaction_id: str
    store_id: int = 0


class VoidPaymentResult(ErrorCollectingResult):
    new_payment_status: PaymentStatus = PaymentStatus.PENDING
