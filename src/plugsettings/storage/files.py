"""File-backed plugin data stores.

Each plugin keeps its whole payload in one file inside its own directory
under the host's data directory, e.g. ``<data_dir>/<plugin id>/data.json``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Final

import yaml

from plugsettings.config import HostConfig
from plugsettings.errors import PersistError, RetrievalError
from plugsettings.manifest import PluginManifest
from plugsettings.utils.file import read_text_if_exists, replace_text

logger: Final = logging.getLogger(__name__)


class FileDataStore(ABC):
    """Base class for stores that keep the payload in a single text file.

    Subclasses only provide ``encode`` and ``decode``. Blocking file access
    runs in a worker thread so the event loop only suspends while waiting
    on it.
    """

    def __init__(self, path: Path):
        self.path = path

    @abstractmethod
    def encode(self, data: Any) -> str:
        """Serialize a payload to file text."""

    @abstractmethod
    def decode(self, text: str) -> Any:
        """Parse file text back into a payload."""

    def _read(self) -> Any:
        text = read_text_if_exists(self.path)
        if text is None:
            logger.debug("No data file at %s", self.path)
            return None
        return self.decode(text)

    def _write(self, data: Any) -> None:
        replace_text(self.path, self.encode(data))

    async def load_data(self) -> Any:
        """Return the decoded file contents, or None if the file is absent.

        Raises:
            RetrievalError: If the file cannot be read or decoded
        """
        try:
            return await asyncio.to_thread(self._read)
        except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as exc:
            logger.warning("Failed to read plugin data from %s: %s", self.path, exc)
            raise RetrievalError("Unable to read plugin data", self.path, exc) from exc

    async def save_data(self, data: Any) -> None:
        """Replace the file with the encoded payload.

        Raises:
            PersistError: If the payload cannot be encoded or written
        """
        try:
            await asyncio.to_thread(self._write, data)
        except (OSError, TypeError, ValueError, yaml.YAMLError) as exc:
            logger.warning("Failed to write plugin data to %s: %s", self.path, exc)
            raise PersistError("Unable to write plugin data", self.path, exc) from exc
        logger.debug("Plugin data written to %s", self.path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"


class JsonFileStore(FileDataStore):
    """Plugin data kept as a JSON document."""

    def __init__(self, path: Path, indent: int = 2):
        super().__init__(path)
        self.indent = indent

    def encode(self, data: Any) -> str:
        return json.dumps(data, indent=self.indent, ensure_ascii=False) + "\n"

    def decode(self, text: str) -> Any:
        if not text.strip():
            return None
        return json.loads(text)


class YamlFileStore(FileDataStore):
    """Plugin data kept as a YAML document."""

    def encode(self, data: Any) -> str:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    def decode(self, text: str) -> Any:
        return yaml.safe_load(text)


def create_store(config: HostConfig, manifest: PluginManifest) -> FileDataStore:
    """Build the data store a plugin uses under the given host configuration.

    Args:
        config: Host configuration (data directory and format)
        manifest: Identity of the plugin

    Returns:
        A JSON or YAML file store located in the plugin's own directory
    """
    path = config.plugin_dir(manifest.id) / config.data_filename
    if config.data_format == "yaml":
        return YamlFileStore(path)
    return JsonFileStore(path, indent=config.indent)
