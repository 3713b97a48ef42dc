"""
Plugin Registry

- Plugins register themselves by system name with @register_plugin
- PluginRegistry builds plugin instances for a request and lists what is installed
"""
from typing import Dict, List, Type
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import PluginNotFoundError
from storefront.plugins.base import BasePlugin, PluginDescriptor

logger = logging.getLogger(__name__)

# Registry of plugin implementations
_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


def register_plugin(cls: Type[BasePlugin]) -> Type[BasePlugin]:
    """
    Class decorator to register a plugin under its system_name.

    Usage:
        @register_plugin
        class CanadaPostComputationMethod(ShippingRateComputationMethod):
            system_name = "Shipping.CanadaPost"
    """
    _PLUGIN_REGISTRY[cls.system_name.lower()] = cls
    logger.info(f"Registered plugin: {cls.system_name} -> {cls.__name__}")
    return cls


class PluginRegistry:
    """Lookup and construction of registered plugins."""

    @classmethod
    def get_plugin_class(cls, system_name: str) -> Type[BasePlugin]:
        plugin_cls = _PLUGIN_REGISTRY.get(system_name.lower())
        if plugin_cls is None:
            raise PluginNotFoundError(f"Plugin '{system_name}' is not registered", system_name=system_name)
        return plugin_cls

    @classmethod
    async def create(cls, system_name: str, db: AsyncSession, store_id: int = 0) -> BasePlugin:
        plugin_cls = cls.get_plugin_class(system_name)
        return await plugin_cls.create(db, store_id)

    @classmethod
    def get_descriptors(cls, group: str = None) -> List[PluginDescriptor]:
        descriptors = [plugin_cls.descriptor() for plugin_cls in _PLUGIN_REGISTRY.values()]
        if group:
            descriptors = [d for d in descriptors if d.group.lower() == group.lower()]
        return sorted(descriptors, key=lambda d: (d.group, d.friendly_name))


# Import plugins to trigger registration
# These imports must be at the bottom to avoid circular imports
from storefront.plugins.payments.paypal_direct.processor import PayPalDirectPaymentProcessor  # noqa: E402, F401
from storefront.plugins.shipping.canada_post.computation import CanadaPostComputationMethod  # noqa: E402, F401
