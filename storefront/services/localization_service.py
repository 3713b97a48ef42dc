"""
Localization Service

Resolves UI strings by resource name. Database resources win over the
built-in defaults; unknown names resolve to the name itself so a missing
resource is visible without breaking the page.
"""
import logging
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.localization import LocaleStringResource

logger = logging.getLogger(__name__)

DEFAULT_RESOURCES: Dict[str, str] = {
    "Admin.Common.All": "All",
    "Admin.Plugins.Saved": "The plugin has been updated successfully.",
    "Payment.CardNumber.Wrong": "Wrong card number",
    "Payment.CardCode.Wrong": "Wrong card code",
    "Payment.ExpireMonth.Required": "Expire month is required",
    "Payment.ExpireYear.Required": "Expire year is required",
    "Payment.ExpirationDate.Expired": "Card is expired",
}


class LocalizationService:
    """Locale string resource lookups and plugin resource registration."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_resource_entity(self, resource_name: str) -> Optional[LocaleStringResource]:
        result = await self.db.execute(
            select(LocaleStringResource).where(LocaleStringResource.resource_name == resource_name)
        )
        return result.scalar_one_or_none()

    async def get_resource(self, resource_name: str, default: Optional[str] = None) -> str:
        resource = await self._get_resource_entity(resource_name)
        if resource is not None:
            return resource.resource_value

        if default is not None:
            return default
        if resource_name in DEFAULT_RESOURCES:
            return DEFAULT_RESOURCES[resource_name]

        logger.debug(f"Locale resource not found: {resource_name}")
        return resource_name

    async def add_or_update_plugin_resource(self, resource_name: str, resource_value: str) -> None:
        resource = await self._get_resource_entity(resource_name)
        if resource is not None:
            resource.resource_value = resource_value
        else:
            self.db.add(LocaleStringResource(resource_name=resource_name, resource_value=resource_value))
        await self.db.commit()

    async def delete_plugin_resource(self, resource_name: str) -> None:
        resource = await self._get_resource_entity(resource_name)
        if resource is not None:
            await self.db.delete(resource)
            await self.db.commit()
