"""Host-facing contract of a plugin that owns persistent settings."""

from __future__ import annotations

from typing import Any, MutableMapping, Protocol, TypeVar, runtime_checkable

from plugsettings.storage.protocols import DataPersistence

SettingsObject = MutableMapping[str, Any]

TSettings = TypeVar("TSettings", bound=SettingsObject)


@runtime_checkable
class PluginWithSettings(DataPersistence, Protocol):
    """Protocol for plugins exposing the settings lifecycle to their host.

    ``settings`` always returns the same object. Lifecycle operations clear
    and refill it in place instead of rebinding it.
    """

    @property
    def settings(self) -> SettingsObject:
        """The live settings object."""
        ...

    def get_default_settings(self) -> SettingsObject:
        """Return a complete default settings object."""
        ...

    async def load_settings(self) -> None:
        """Rebuild the settings object from defaults and persisted data."""
        ...

    async def save_settings(self) -> None:
        """Persist the settings object wholesale."""
        ...

    async def on_external_settings_change(self) -> None:
        """React to the persisted data having changed outside the plugin."""
        ...
