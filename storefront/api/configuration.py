"""
Plugin configuration pages

Shared GET/POST handling for store-scoped plugin configuration forms:
load the settings for the active store scope, show them with their
override flags, and on submit save or revert each field.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.schemas.common import ConfigurationResponse, StoreScopedConfigurationModel
from storefront.services.localization_service import LocalizationService
from storefront.services.setting_service import SettingService, SettingsBase

logger = logging.getLogger(__name__)


def format_validation_errors(error: ValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return messages


async def render_configuration(
    db: AsyncSession,
    model_cls: Type[StoreScopedConfigurationModel],
    settings_cls: Type[SettingsBase],
    store_scope: int,
    notification: Optional[str] = None,
    errors: Optional[List[str]] = None,
) -> ConfigurationResponse:
    setting_service = SettingService(db)
    plugin_settings = await setting_service.load_setting(settings_cls, store_scope)

    model = model_cls.from_settings(plugin_settings)
    model.active_store_scope_configuration = store_scope
    if store_scope > 0:
        model.apply_override_flags(await setting_service.get_override_flags(settings_cls, store_scope))

    return ConfigurationResponse(
        model=model.model_dump(mode="json"),
        active_store_scope_configuration=store_scope,
        notification=notification,
        errors=errors or [],
    )


async def save_configuration(
    db: AsyncSession,
    model_cls: Type[StoreScopedConfigurationModel],
    settings_cls: Type[SettingsBase],
    store_scope: int,
    payload: Dict[str, Any],
) -> ConfigurationResponse:
    """
    Save a submitted configuration form.

    An invalid form saves nothing and comes back with its errors.
    """
    try:
        model = model_cls.model_validate(payload)
    except ValidationError as e:
        errors = format_validation_errors(e)
        logger.info(f"{model_cls.__name__} rejected for store scope {store_scope}: {len(errors)} errors")
        return await render_configuration(db, model_cls, settings_cls, store_scope, errors=errors)

    setting_service = SettingService(db)
    plugin_settings = await setting_service.load_setting(settings_cls, store_scope)
    model.apply_to(plugin_settings)

    await setting_service.save_store_scoped(plugin_settings, model.override_flags(), store_scope)
    logger.info(f"{settings_cls.__name__} saved for store scope {store_scope}")

    notification = await LocalizationService(db).get_resource("Admin.Plugins.Saved")
    return await render_configuration(db, model_cls, settings_cls, store_scope, notification=notification)
