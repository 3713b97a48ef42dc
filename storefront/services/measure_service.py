"""
Measure Service

Weight and dimension units. Quantities inside the store are kept in the
primary measure (MeasureSettings); a measure's ratio is how many of its
units make one primary unit.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ExchangeRateError
from storefront.models.directory import MeasureDimension, MeasureWeight
from storefront.services.setting_service import SettingsBase

logger = logging.getLogger(__name__)


class MeasureSettings(SettingsBase):
    base_dimension_id: int = 1  # inch(es)
    base_weight_id: int = 2  # lb(s)


class MeasureService:

    def __init__(self, db: AsyncSession, measure_settings: MeasureSettings):
        self.db = db
        self.measure_settings = measure_settings

    async def get_measure_weight_by_system_keyword(self, system_keyword: str) -> Optional[MeasureWeight]:
        if not system_keyword:
            return None
        result = await self.db.execute(
            select(MeasureWeight).where(func.lower(MeasureWeight.system_keyword) == system_keyword.lower())
        )
        return result.scalars().first()

    async def get_measure_dimension_by_system_keyword(self, system_keyword: str) -> Optional[MeasureDimension]:
        if not system_keyword:
            return None
        result = await self.db.execute(
            select(MeasureDimension).where(func.lower(MeasureDimension.system_keyword) == system_keyword.lower())
        )
        return result.scalars().first()

    def convert_from_primary_measure_weight(self, value: Decimal, target: MeasureWeight) -> Decimal:
        """Convert a weight in the primary weight unit into target's unit."""
        value = Decimal(value)
        if target.id == self.measure_settings.base_weight_id:
            return value

        ratio = Decimal(target.ratio or 0)
        if ratio == 0:
            raise ExchangeRateError(
                f"Exchange ratio not set for weight [{target.name}]",
                details={"system_keyword": target.system_keyword},
            )
        return value * ratio

    def convert_from_primary_measure_dimension(self, value: Decimal, target: MeasureDimension) -> Decimal:
        """Convert a length in the primary dimension unit into target's unit."""
        value = Decimal(value)
        if target.id == self.measure_settings.base_dimension_id:
            return value

        ratio = Decimal(target.ratio or 0)
        if ratio == 0:
            raise ExchangeRateError(
                f"Exchange ratio not set for dimension [{target.name}]",
                details={"system_keyword": target.system_keyword},
            )
        return value * ratio
