"""
Shared view-model schemas: dropdown items and store-scoped configuration forms.
"""
from abc import abstractmethod
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel

from storefront.services.setting_service import SettingsBase

OVERRIDE_SUFFIX = "_override_for_store"


class SelectListItem(BaseModel):
    """One option of a dropdown."""
    text: str
    value: str
    selected: bool = False


def select_matching(items: List[SelectListItem], value: Optional[str]) -> Optional[SelectListItem]:
    """
    Mark the first item whose value matches (case-insensitive) as selected.

    Returns the selected item, or None when nothing matched.
    """
    if value is None:
        return None
    wanted = value.casefold()
    for item in items:
        if item.value.casefold() == wanted:
            item.selected = True
            return item
    return None


class StoreScopedConfigurationModel(BaseModel):
    """
    Base for plugin configuration forms.

    Each form field "<name>" has a companion boolean
    "<name>_override_for_store" that says whether the value is stored for
    the active store scope rather than inherited from the global scope.
    Form fields named differently from their settings field are listed in
    setting_field_aliases (form name -> settings field name).
    """
    setting_field_aliases: ClassVar[Dict[str, str]] = {}

    active_store_scope_configuration: int = 0

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: SettingsBase) -> "StoreScopedConfigurationModel":
        """Build the form from loaded settings."""

    @abstractmethod
    def apply_to(self, settings: SettingsBase) -> None:
        """Copy submitted values onto settings."""

    @classmethod
    def override_field(cls, form_field: str) -> str:
        return f"{form_field}{OVERRIDE_SUFFIX}"

    def override_flags(self) -> Dict[str, bool]:
        """Override flags keyed by settings field name."""
        flags = {}
        for name in type(self).model_fields:
            if name.endswith(OVERRIDE_SUFFIX):
                form_field = name[: -len(OVERRIDE_SUFFIX)]
                setting_field = self.setting_field_aliases.get(form_field, form_field)
                flags[setting_field] = bool(getattr(self, name))
        return flags

    def apply_override_flags(self, flags: Dict[str, bool]) -> None:
        """Set the form's override flags from flags keyed by settings field name."""
        form_fields = {setting: form for form, setting in self.setting_field_aliases.items()}
        for setting_field, flag in flags.items():
            override_name = self.override_field(form_fields.get(setting_field, setting_field))
            if override_name in type(self).model_fields:
                setattr(self, override_name, flag)


class ConfigurationResponse(BaseModel):
    """What a plugin configuration endpoint returns."""
    model: Dict
    active_store_scope_configuration: int = 0
    notification: Optional[str] = None
    errors: List[str] = []
