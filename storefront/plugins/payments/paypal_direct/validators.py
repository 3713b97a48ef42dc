"""
Checkout payment form validation.

Every rule runs; the result is the full list of messages, localized.
"""
import re
from typing import List, Optional

from storefront.plugins.payments.paypal_direct.schemas import PaymentInfoForm
from storefront.services.localization_service import LocalizationService

CARD_CODE_PATTERN = re.compile(r"^[0-9]{3,4}$")


def is_valid_credit_card_number(card_number: Optional[str]) -> bool:
    """Luhn checksum. Spaces and dashes are ignored; any other non-digit fails."""
    if not card_number or not card_number.strip():
        return False

    digits = card_number.replace(" ", "").replace("-", "")
    checksum = 0
    double = False
    for char in reversed(digits):
        if not char.isdigit():
            return False
        value = int(char) * (2 if double else 1)
        double = not double
        while value > 0:
            checksum += value % 10
            value //= 10
    return checksum % 10 == 0


class PaymentInfoValidator:

    def __init__(self, localization_service: LocalizationService):
        self.localization_service = localization_service

    async def validate(self, form: PaymentInfoForm) -> List[str]:
        errors = []
        if not is_valid_credit_card_number(form.card_number):
            errors.append(await self.localization_service.get_resource("Payment.CardNumber.Wrong"))
        if not CARD_CODE_PATTERN.match(form.card_code or ""):
            errors.append(await self.localization_service.get_resource("Payment.CardCode.Wrong"))
        if not (form.expire_month or "").strip():
            errors.append(await self.localization_service.get_resource("Payment.ExpireMonth.Required"))
        if not (form.expire_year or "").strip():
            errors.append(await self.localization_service.get_resource("Payment.ExpireYear.Required"))
        return errors
