"""
Base Plugin Interface

Every payment and shipping plugin derives from BasePlugin. A plugin owns:
  - a settings class persisted through SettingService
  - the locale resources its configuration form uses
  - an admin configuration route

install() writes default settings and locale resources; uninstall()
removes both.
"""
from abc import ABC
from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.services.localization_service import LocalizationService
from storefront.services.setting_service import SettingService, SettingsBase


@dataclass
class PluginDescriptor:
    """Listing entry for the admin plugin page."""
    system_name: str
    friendly_name: str
    group: str
    version: str
    configuration_path: Optional[str] = None


class BasePlugin(ABC):
    system_name: ClassVar[str]
    friendly_name: ClassVar[str]
    group: ClassVar[str] = "Misc"
    version: ClassVar[str] = "1.0.0"
    configuration_path: ClassVar[Optional[str]] = None

    settings_class: ClassVar[Optional[Type[SettingsBase]]] = None
    locale_resources: ClassVar[Dict[str, str]] = {}

    def __init__(self, db: AsyncSession):
        self.db = db
        self.setting_service = SettingService(db)
        self.localization_service = LocalizationService(db)

    @classmethod
    async def create(cls, db: AsyncSession, store_id: int = 0) -> "BasePlugin":
        """Build a plugin instance for a store. Plugins with runtime dependencies override this."""
        return cls(db)

    @classmethod
    def descriptor(cls) -> PluginDescriptor:
        return PluginDescriptor(
            system_name=cls.system_name,
            friendly_name=cls.friendly_name,
            group=cls.group,
            version=cls.version,
            configuration_path=cls.configuration_path,
        )

    def default_settings(self) -> Optional[SettingsBase]:
        return self.settings_class() if self.settings_class else None

    async def install(self) -> None:
        settings = self.default_settings()
        if settings is not None:
            await self.setting_service.save_settings(settings)

        for name, value in self.locale_resources.items():
            await self.localization_service.add_or_update_plugin_resource(name, value)

    async def uninstall(self) -> None:
        if self.settings_class is not None:
            await self.setting_service.delete_settings(self.settings_class)

        for name in self.locale_resources:
            await self.localization_service.delete_plugin_resource(name)

    async def close(self) -> None:
        """Release HTTP clients and other per-request resources."""
