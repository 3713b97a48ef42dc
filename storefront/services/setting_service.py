"""
Setting Service

v1.0.0: Typed, store-scoped settings persisted in the settings table.

Settings classes are pydantic models deriving from SettingsBase. Each field
is stored as its own row keyed "<classname>.<field>" (lowercase) plus a
store id:

    store_id = 0   global value
    store_id > 0   override for one store, falls back to the global value

All rows are read through a process-wide cache shared by every request.
Writes can skip invalidation (clear_cache=False) so a form that saves many
fields invalidates the cache exactly once at the end.

Usage:
    service = SettingService(db)
    canada_post = await service.load_setting(CanadaPostSettings, store_id=2)

    canada_post.api_key = "..."
    await service.save_setting(canada_post, "api_key", store_id=2)
"""
import enum
import logging
import threading
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.setting import Setting

logger = logging.getLogger(__name__)

S = TypeVar("S", bound="SettingsBase")


class SettingsBase(BaseModel):
    """
    Base class for typed settings.

    Field defaults are the values used when no row exists for a key.
    """

    @classmethod
    def setting_key(cls, field_name: str) -> str:
        if field_name not in cls.model_fields:
            raise ValueError(f"{cls.__name__} has no setting '{field_name}'")
        return f"{cls.__name__}.{field_name}".lower()

    @classmethod
    def field_names(cls) -> List[str]:
        return list(cls.model_fields.keys())


def _settings_class(settings: Union[SettingsBase, Type[SettingsBase]]) -> Type[SettingsBase]:
    return settings if isinstance(settings, type) else type(settings)


def to_setting_value(value: Any) -> str:
    """Serialize a settings field value to its stored string form."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


def _enum_type(annotation: Any) -> Optional[Type[enum.Enum]]:
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return annotation
    for arg in typing.get_args(annotation):
        if isinstance(arg, type) and issubclass(arg, enum.Enum):
            return arg
    return None


def _accepts_str(annotation: Any) -> bool:
    return annotation is str or str in typing.get_args(annotation)


def from_setting_value(annotation: Any, raw: str) -> Any:
    """
    Parse a stored string back into a settings field value.

    Raises pydantic.ValidationError when the stored text does not fit the
    field type.
    """
    enum_type = _enum_type(annotation)
    if enum_type is not None and raw in enum_type.__members__:
        return enum_type[raw]
    if raw == "" and not _accepts_str(annotation):
        return TypeAdapter(annotation).validate_python(None)
    return TypeAdapter(annotation).validate_python(raw)


@dataclass(frozen=True)
class CachedSetting:
    """Detached copy of a settings row held in the cache."""
    id: int
    name: str
    value: str
    store_id: int


class SettingsCache:
    """
    Process-wide cache of all settings rows, grouped by lowercase name.

    Loaded lazily on first read, dropped on clear(). Readers always get the
    full snapshot so a concurrent clear never exposes a half-built dict.

    Every clear() bumps the generation. A loader records the generation
    before querying and stores its snapshot with set_if_generation(), so a
    snapshot read before a write cannot land after that write's clear().
    """

    def __init__(self):
        self._settings: Optional[Dict[str, List[CachedSetting]]] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._settings is not None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self) -> Optional[Dict[str, List[CachedSetting]]]:
        with self._lock:
            return self._settings

    def set(self, settings: Dict[str, List[CachedSetting]]) -> None:
        with self._lock:
            self._settings = settings

    def set_if_generation(self, generation: int, settings: Dict[str, List[CachedSetting]]) -> bool:
        """Store the snapshot only if no clear() happened since `generation` was read."""
        with self._lock:
            if self._generation != generation:
                return False
            self._settings = settings
            return True

    def clear(self) -> None:
        with self._lock:
            self._settings = None
            self._generation += 1


# Global cache instance
settings_cache = SettingsCache()


class SettingService:
    """
    Service for reading and writing store-scoped settings.

    Every write commits on its own, so a multi-field save is best-effort:
    a failure on one field leaves the earlier fields saved.
    """

    def __init__(self, db: AsyncSession, cache: SettingsCache = settings_cache):
        self.db = db
        self._cache = cache

    # ==================== Raw key access ====================

    async def _get_all_settings_cached(self) -> Dict[str, List[CachedSetting]]:
        cached = self._cache.get()
        if cached is not None:
            return cached

        generation = self._cache.generation
        result = await self.db.execute(select(Setting).order_by(Setting.name, Setting.store_id))
        grouped: Dict[str, List[CachedSetting]] = {}
        for row in result.scalars().all():
            grouped.setdefault(row.name.lower(), []).append(CachedSetting(
                id=row.id,
                name=row.name,
                value=row.value,
                store_id=row.store_id,
            ))

        if self._cache.set_if_generation(generation, grouped):
            logger.debug(f"Settings cache loaded: {len(grouped)} keys")
        else:
            logger.debug("Settings changed while loading; snapshot not cached")
        return grouped

    async def _find(self, key: str, store_id: int) -> Optional[CachedSetting]:
        settings = await self._get_all_settings_cached()
        for cached in settings.get(key.strip().lower(), []):
            if cached.store_id == store_id:
                return cached
        return None

    async def get_setting_by_key(
        self,
        key: str,
        default: Optional[str] = None,
        store_id: int = 0,
        load_shared_value_if_not_found: bool = False,
    ) -> Optional[str]:
        """
        Get the raw stored value for a key.

        With load_shared_value_if_not_found, a missing store override falls
        back to the global (store 0) value.
        """
        cached = await self._find(key, store_id)
        if cached is None and store_id > 0 and load_shared_value_if_not_found:
            cached = await self._find(key, 0)
        return cached.value if cached else default

    async def set_setting(self, key: str, value: str, store_id: int = 0, clear_cache: bool = True) -> None:
        """Insert or update the row for key/store_id."""
        key = key.strip().lower()
        cached = await self._find(key, store_id)
        setting = await self.db.get(Setting, cached.id) if cached else None

        if setting is not None:
            setting.value = value
        else:
            self.db.add(Setting(name=key, value=value, store_id=store_id))

        await self.db.commit()
        logger.debug(f"Saved setting {key} for store {store_id}")

        if clear_cache:
            self.clear_cache()

    async def delete_setting_by_key(self, key: str, store_id: int = 0, clear_cache: bool = True) -> bool:
        """Delete the row for key/store_id. Returns False when there was none."""
        cached = await self._find(key, store_id)
        if cached is None:
            return False

        setting = await self.db.get(Setting, cached.id)
        if setting is not None:
            await self.db.delete(setting)
            await self.db.commit()
            logger.debug(f"Deleted setting {cached.name} for store {store_id}")

        if clear_cache:
            self.clear_cache()
        return setting is not None

    def clear_cache(self) -> None:
        """Invalidate the process-wide settings cache."""
        self._cache.clear()
        logger.debug("Settings cache cleared")

    # ==================== Typed settings ====================

    async def load_setting(self, settings_cls: Type[S], store_id: int = 0) -> S:
        """
        Load a settings class for a store scope.

        Each field resolves to the store value, then the global value, then
        the class default.
        """
        values: Dict[str, Any] = {}
        for field_name, field_info in settings_cls.model_fields.items():
            raw = await self.get_setting_by_key(
                settings_cls.setting_key(field_name),
                store_id=store_id,
                load_shared_value_if_not_found=True,
            )
            if raw is None:
                continue
            try:
                values[field_name] = from_setting_value(field_info.annotation, raw)
            except ValidationError:
                logger.warning(
                    f"Ignoring unparseable value for {settings_cls.setting_key(field_name)} "
                    f"(store {store_id}), using default"
                )

        return settings_cls(**values)

    async def setting_exists(
        self,
        settings: Union[SettingsBase, Type[SettingsBase]],
        field_name: str,
        store_id: int = 0,
    ) -> bool:
        """Check whether a row exists for exactly this field and store."""
        key = _settings_class(settings).setting_key(field_name)
        return await self._find(key, store_id) is not None

    async def save_setting(
        self,
        settings: SettingsBase,
        field_name: str,
        store_id: int = 0,
        clear_cache: bool = True,
    ) -> None:
        """Persist one field of a settings instance at a store scope."""
        key = type(settings).setting_key(field_name)
        await self.set_setting(key, to_setting_value(getattr(settings, field_name)), store_id, clear_cache)

    async def save_settings(self, settings: SettingsBase, store_id: int = 0) -> None:
        """Persist every field of a settings instance, then clear the cache once."""
        for field_name in type(settings).field_names():
            await self.save_setting(settings, field_name, store_id, clear_cache=False)
        self.clear_cache()

    async def delete_setting(
        self,
        settings: Union[SettingsBase, Type[SettingsBase]],
        field_name: str,
        store_id: int = 0,
        clear_cache: bool = True,
    ) -> bool:
        """Delete one field's row at a store scope."""
        key = _settings_class(settings).setting_key(field_name)
        return await self.delete_setting_by_key(key, store_id, clear_cache)

    async def delete_settings(self, settings: Union[SettingsBase, Type[SettingsBase]]) -> int:
        """Delete every row of a settings class across all stores."""
        settings_cls = _settings_class(settings)
        all_settings = await self._get_all_settings_cached()

        deleted = 0
        for field_name in settings_cls.field_names():
            for cached in all_settings.get(settings_cls.setting_key(field_name), []):
                setting = await self.db.get(Setting, cached.id)
                if setting is not None:
                    await self.db.delete(setting)
                    deleted += 1

        await self.db.commit()
        self.clear_cache()
        logger.info(f"Deleted {deleted} settings rows for {settings_cls.__name__}")
        return deleted

    # ==================== Store-scoped configuration forms ====================

    async def get_override_flags(
        self,
        settings: Union[SettingsBase, Type[SettingsBase]],
        store_id: int,
    ) -> Dict[str, bool]:
        """
        Per-field "override for store" flags for a configuration form.

        Only meaningful for store_id > 0; the global scope has no overrides.
        """
        settings_cls = _settings_class(settings)
        flags = {field_name: False for field_name in settings_cls.field_names()}
        if store_id > 0:
            for field_name in flags:
                flags[field_name] = await self.setting_exists(settings_cls, field_name, store_id)
        return flags

    async def save_store_scoped(
        self,
        settings: SettingsBase,
        overrides: Dict[str, bool],
        store_id: int,
    ) -> None:
        """
        Save a submitted configuration form.

        Fields with the override flag set (or any field on the global scope)
        are saved at store_id. Fields without it lose their store override
        and fall back to the global value. The cache is cleared once at the
        end instead of after each field.
        """
        for field_name in type(settings).field_names():
            if overrides.get(field_name, False) or store_id == 0:
                await self.save_setting(settings, field_name, store_id, clear_cache=False)
            elif store_id > 0:
                await self.delete_setting(settings, field_name, store_id, clear_cache=False)

        self.clear_cache()
