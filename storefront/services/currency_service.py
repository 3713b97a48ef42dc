"""
Currency Service

Currency lookups and conversion into the primary store currency.
Currency.rate is the number of units of that currency per unit of the
primary store currency.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ExchangeRateError
from storefront.models.directory import Currency
from storefront.services.setting_service import SettingsBase

logger = logging.getLogger(__name__)


class CurrencySettings(SettingsBase):
    primary_store_currency_id: int = 1
    primary_exchange_rate_currency_id: int = 1


class CurrencyService:

    def __init__(self, db: AsyncSession, currency_settings: CurrencySettings):
        self.db = db
        self.currency_settings = currency_settings

    async def get_currency_by_code(self, currency_code: str) -> Optional[Currency]:
        if not currency_code:
            return None
        result = await self.db.execute(
            select(Currency).where(func.upper(Currency.currency_code) == currency_code.upper())
        )
        return result.scalars().first()

    async def get_currency_by_id(self, currency_id: int) -> Optional[Currency]:
        if currency_id <= 0:
            return None
        return await self.db.get(Currency, currency_id)

    def convert_to_primary_store_currency(self, amount: Decimal, source_currency: Currency) -> Decimal:
        """
        Convert an amount in source_currency into the primary store currency.

        Raises ExchangeRateError when the source currency has a zero rate.
        """
        amount = Decimal(amount)
        if amount == 0 or source_currency.id == self.currency_settings.primary_store_currency_id:
            return amount

        rate = Decimal(source_currency.rate or 0)
        if rate == 0:
            raise ExchangeRateError(
                f"Exchange rate not found for currency [{source_currency.name}]",
                details={"currency_code": source_currency.currency_code},
            )
        return amount / rate
