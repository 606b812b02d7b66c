"""Persistence boundary for plugin data."""

from .files import FileDataStore, JsonFileStore, YamlFileStore, create_store
from .protocols import DataPersistence, ErrorSimulatingDataStore, MemoryDataStore

__all__ = [
    "DataPersistence",
    "ErrorSimulatingDataStore",
    "FileDataStore",
    "JsonFileStore",
    "MemoryDataStore",
    "YamlFileStore",
    "create_store",
]
