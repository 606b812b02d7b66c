"""Host configuration loaded from plugsettings.yaml."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import ClassVar, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# Load environment variables from .env file(s)
load_dotenv()


def _interpolate_env(content: str) -> str:
    return re.sub(r"\$\{(\w+)\}", lambda m: os.getenv(m.group(1), ""), content)


def _default_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / "plugsettings"


class HostConfig(BaseModel):
    """Where and how the host keeps plugin data.

    Every field has a default, so a missing config file is not an error;
    ``HostConfig()`` is a valid configuration.
    """

    # Default search paths for configuration
    DEFAULT_CONFIG_PATHS: ClassVar[list[Path]] = [
        Path("plugsettings.yaml"),
        Path("~/.config/plugsettings/config.yaml").expanduser(),
        Path("/etc/plugsettings/config.yaml"),
    ]

    data_dir: Path = Field(
        default_factory=_default_data_dir,
        description="Directory holding one sub-directory per plugin id",
    )
    data_format: Literal["json", "yaml"] = Field(
        "json", description="Encoding of each plugin's data file"
    )
    indent: int = Field(2, ge=0, le=8, description="Indentation for JSON data files")
    debug: bool = Field(False, description="Enable debug logging")

    # ---- validators ----
    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()

    # ---- convenience methods ----
    @property
    def data_filename(self) -> str:
        """File name used for every plugin's data file."""
        return f"data.{self.data_format}"

    def plugin_dir(self, plugin_id: str) -> Path:
        """Directory holding a single plugin's data file.

        Args:
            plugin_id: Manifest id of the plugin

        Returns:
            Path below ``data_dir``
        """
        return self.data_dir / plugin_id

    @classmethod
    def load(cls, path: Path | None = None) -> HostConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to config file (optional, searches default locations if None)

        Returns:
            Validated HostConfig object; defaults when no file is found

        Raises:
            FileNotFoundError: If the explicit path or PLUGSETTINGS_CONFIG does not exist
            RuntimeError: If the config file cannot be parsed or is invalid
        """
        if path is None:
            # Check environment variable first
            env_path = os.environ.get("PLUGSETTINGS_CONFIG")
            if env_path:
                path = Path(env_path)
                if not path.exists():
                    raise FileNotFoundError(
                        f"Config file from PLUGSETTINGS_CONFIG not found: {path}"
                    )
            else:
                # Try default paths
                for default_path in cls.DEFAULT_CONFIG_PATHS:
                    if default_path.exists():
                        path = default_path
                        break
                else:
                    return cls()
        elif not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        # Load and parse config
        try:
            raw = _interpolate_env(path.read_text())
            data = yaml.safe_load(raw)
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Unable to read config YAML: {exc}") from exc

        try:
            return cls.model_validate(data or {})
        except ValidationError as err:
            raise RuntimeError(f"Invalid configuration:\n{err}") from err
