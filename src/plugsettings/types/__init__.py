"""Type definitions for plugsettings."""

from .lifecycle import PluginWithSettings, SettingsObject, TSettings

__all__ = [
    "PluginWithSettings",
    "SettingsObject",
    "TSettings",
]
