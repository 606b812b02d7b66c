"""Reference-stable settings lifecycle for host-loaded plugins."""

__version__ = "0.1.0"

from .config import HostConfig
from .controller import AbstractPluginWithSettings, StaticDefaultsPlugin
from .errors import DefaultsError, PersistError, RetrievalError, SettingsError
from .manifest import PluginManifest
from .storage import DataPersistence, JsonFileStore, MemoryDataStore, YamlFileStore
from .types import PluginWithSettings, SettingsObject
from .utils import deep_purge

__all__ = [
    "AbstractPluginWithSettings",
    "DataPersistence",
    "DefaultsError",
    "HostConfig",
    "JsonFileStore",
    "MemoryDataStore",
    "PersistError",
    "PluginManifest",
    "PluginWithSettings",
    "RetrievalError",
    "SettingsError",
    "SettingsObject",
    "StaticDefaultsPlugin",
    "YamlFileStore",
    "deep_purge",
]
