import pytest
from pathlib import Path
from typing import Any

from plugsettings.config import HostConfig
from plugsettings.manifest import PluginManifest


@pytest.fixture
def manifest() -> PluginManifest:
    return PluginManifest(id="test-plugin", name="Test", version="1.0.0")


@pytest.fixture
def host_config(tmp_path: Path) -> HostConfig:
    return HostConfig(data_dir=tmp_path / "plugins")


@pytest.fixture
def nested_defaults() -> dict[str, Any]:
    return {
        "theme": "dark",
        "editor": {"font_size": 14, "keymap": {"save": "mod+s"}},
        "recent": ["a.md", "b.md"],
    }
