# filepath: src/plugsettings/controller.py
"""Settings lifecycle controller for host-loaded plugins."""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Generic, cast

import yaml

from plugsettings.config import HostConfig
from plugsettings.errors import DefaultsError
from plugsettings.manifest import PluginManifest
from plugsettings.storage.files import create_store
from plugsettings.storage.protocols import DataPersistence, MemoryDataStore
from plugsettings.types.lifecycle import SettingsObject, TSettings
from plugsettings.utils.purge import deep_purge

TEST_MANIFEST: Final = PluginManifest(id="test-plugin", name="Test", version="1.0.0")

logger: Final = logging.getLogger(__name__)


class AbstractPluginWithSettings(ABC, Generic[TSettings]):
    """Base class for plugins that keep structured, persistent settings.

    The class owns exactly one settings object for its whole lifetime:
    - It is created empty here and never rebound
    - Reloading purges it in place, then refills it from defaults and
      persisted data, so consumers holding a reference (or a reference to a
      nested dict that survives the reload) keep seeing live values
    - Saving hands that same object to the data store

    Subclasses only need to implement ``get_default_settings``. Nothing here
    watches the persisted data; the host calls ``load_settings`` on
    activation and ``on_external_settings_change`` when it notices the data
    changed underneath the plugin.

    Lifecycle calls are not serialized. Callers must await one before
    starting the next, since overlapping reloads purge the same object.
    """

    def __init__(
        self,
        manifest: PluginManifest,
        store: DataPersistence | None = None,
    ):
        """Initialize the plugin with its identity and persistence.

        Args:
            manifest: Identity of the plugin
            store: Optional data store; defaults to the plugin's data file
                under the default host configuration
        """
        self.manifest = manifest
        self.store: DataPersistence = store or create_store(HostConfig(), manifest)
        self._settings: TSettings = cast(TSettings, {})

    @property
    def settings(self) -> TSettings:
        """The live settings object.

        The property has no setter, so the reference cannot be replaced from
        outside. Its fields can still be changed in place.
        """
        return self._settings

    @abstractmethod
    def get_default_settings(self) -> TSettings:
        """Return a complete default settings object.

        A deep copy of the result is placed key by key onto the live object,
        so it may be a fresh dict or a cached one.
        """

    async def load_data(self) -> Any:
        """Read the raw persisted payload from the data store."""
        return await self.store.load_data()

    async def save_data(self, data: Any) -> None:
        """Write a raw payload to the data store, replacing the old one."""
        await self.store.save_data(data)

    def reset_settings(self) -> None:
        """Purge the settings object and refill it with defaults only."""
        deep_purge(self._settings)
        self._settings.update(copy.deepcopy(self.get_default_settings()))

    async def load_settings(self) -> None:
        """Rebuild the settings object from defaults and persisted data.

        Steps, in order:
        1. Purge the settings object in place
        2. Assign every top-level key of ``get_default_settings()``
        3. Await the persisted payload; if it is a mapping, assign its
           top-level keys over the defaults

        Only top-level keys are merged. A persisted nested dict replaces the
        default one at that key. Defaults and payload are deep-copied before
        they are placed, so a later purge never empties the caller's nested
        dicts. Payloads that are not mappings (None, scalars, lists) leave the
        defaults alone.

        If reading the payload fails, the error propagates and the settings
        object is left holding the defaults.
        """
        self.reset_settings()
        raw = await self.load_data()

        if isinstance(raw, Mapping):
            self._settings.update(copy.deepcopy(raw))
        elif raw is not None:
            logger.debug(
                "Ignoring non-mapping plugin data for %s (%s)",
                self.manifest.id,
                type(raw).__name__,
            )
        logger.debug(
            "Settings loaded for %s: %d top-level keys", self.manifest.id, len(self._settings)
        )

    async def save_settings(self) -> None:
        """Persist the live settings object as-is."""
        await self.save_data(self._settings)
        logger.debug("Settings saved for %s", self.manifest.id)

    async def on_external_settings_change(self) -> None:
        """Reload settings after the persisted data changed elsewhere."""
        logger.debug("External settings change for %s; reloading", self.manifest.id)
        await self.load_settings()


class StaticDefaultsPlugin(AbstractPluginWithSettings[SettingsObject]):
    """Plugin whose defaults are a fixed mapping given up front.

    The mapping is returned as-is on every call; the base class copies it
    before placing it.
    """

    def __init__(
        self,
        manifest: PluginManifest,
        defaults: Mapping[str, Any],
        store: DataPersistence | None = None,
    ):
        super().__init__(manifest, store)
        self._defaults = dict(defaults)

    def get_default_settings(self) -> SettingsObject:
        return self._defaults

    @classmethod
    def from_yaml(
        cls,
        path: Path,
        manifest: PluginManifest,
        store: DataPersistence | None = None,
    ) -> StaticDefaultsPlugin:
        """Create a plugin whose defaults are read from a YAML file.

        Args:
            path: YAML file holding a mapping of default settings
            manifest: Identity of the plugin
            store: Optional data store

        Returns:
            StaticDefaultsPlugin instance

        Raises:
            DefaultsError: If the file is missing, unreadable or not a mapping
        """
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise DefaultsError("Unable to read defaults file", path, exc) from exc

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise DefaultsError(
                f"Defaults file must hold a mapping, not {type(data).__name__}", path
            )
        return cls(manifest, data, store)

    @classmethod
    def create_for_testing(
        cls,
        defaults: Mapping[str, Any] | None = None,
        payload: Any = None,
        store: DataPersistence | None = None,
    ) -> StaticDefaultsPlugin:
        """Create a plugin backed by an in-memory store.

        Args:
            defaults: Default settings (empty if None)
            payload: Initial persisted payload of the memory store
            store: Store to use instead of a new MemoryDataStore

        Returns:
            StaticDefaultsPlugin instance using TEST_MANIFEST
        """
        return cls(
            TEST_MANIFEST,
            defaults or {},
            store=store or MemoryDataStore(payload),
        )
