import asyncio
import logging
from typing import Any

import pytest

from plugsettings.controller import AbstractPluginWithSettings, StaticDefaultsPlugin
from plugsettings.errors import PersistError, RetrievalError
from plugsettings.manifest import PluginManifest
from plugsettings.storage.files import JsonFileStore
from plugsettings.storage.protocols import (
    ErrorSimulatingDataStore,
    MemoryDataStore,
    assert_saved_with,
)
from plugsettings.types import PluginWithSettings


class OverridingPlugin(AbstractPluginWithSettings[dict[str, Any]]):
    """Plugin that supplies its own load_data, as hosts allow."""

    def __init__(self, manifest: PluginManifest, payload: Any):
        super().__init__(manifest, MemoryDataStore())
        self.payload = payload

    def get_default_settings(self) -> dict[str, Any]:
        return {"a": 1, "b": 2}

    async def load_data(self) -> Any:
        return self.payload


CACHED_DEFAULTS: dict[str, Any] = {"theme": "dark", "editor": {"font_size": 14}}


class CachedDefaultsPlugin(AbstractPluginWithSettings[dict[str, Any]]):
    """Plugin that hands out the same defaults dict on every call."""

    def get_default_settings(self) -> dict[str, Any]:
        return CACHED_DEFAULTS


class TestConstruction:
    def test_settings_start_empty(self, manifest: PluginManifest):
        plugin = OverridingPlugin(manifest, None)
        assert plugin.settings == {}

    def test_abstract_class_cannot_be_instantiated(self, manifest: PluginManifest):
        with pytest.raises(TypeError):
            AbstractPluginWithSettings(manifest)  # type: ignore[abstract]

    def test_default_store_is_plugin_data_file(
        self, manifest: PluginManifest, monkeypatch: pytest.MonkeyPatch, tmp_path
    ):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        plugin = StaticDefaultsPlugin(manifest, {})
        assert isinstance(plugin.store, JsonFileStore)
        assert plugin.store.path == tmp_path / "plugsettings" / "test-plugin" / "data.json"

    def test_satisfies_host_protocol(self):
        plugin = StaticDefaultsPlugin.create_for_testing()
        assert isinstance(plugin, PluginWithSettings)


class TestSettingsAccessor:
    def test_reference_cannot_be_replaced(self):
        plugin = StaticDefaultsPlugin.create_for_testing({"foo": "bar"})
        with pytest.raises(AttributeError):
            plugin.settings = {}  # type: ignore[misc]

    def test_fields_can_be_mutated(self):
        plugin = StaticDefaultsPlugin.create_for_testing({"foo": "bar"})
        asyncio.run(plugin.load_settings())

        plugin.settings["foo"] = "baz"

        assert plugin.settings["foo"] == "baz"

    def test_reference_is_stable(self):
        plugin = StaticDefaultsPlugin.create_for_testing({"foo": "bar"})
        assert plugin.settings is plugin.settings


class TestLoadSettings:
    def test_persisted_values_override_defaults(self, manifest: PluginManifest):
        plugin = OverridingPlugin(manifest, {"b": 20, "c": 30})
        before = plugin.settings

        result = asyncio.run(plugin.load_settings())

        assert result is None
        assert plugin.settings is before
        assert plugin.settings == {"a": 1, "b": 20, "c": 30}

    @pytest.mark.parametrize("payload", [None, "not an object", [1, 2, 3], 42, True, 1.5])
    def test_non_mapping_payload_yields_defaults(self, manifest: PluginManifest, payload: Any):
        plugin = OverridingPlugin(manifest, payload)
        before = plugin.settings

        asyncio.run(plugin.load_settings())

        assert plugin.settings is before
        assert plugin.settings == {"a": 1, "b": 2}

    def test_repeated_loads_keep_identity(self):
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, payload={"y": 2})
        ref = plugin.settings

        for _ in range(5):
            asyncio.run(plugin.load_settings())

        assert plugin.settings is ref
        assert ref == {"x": 1, "y": 2}

    def test_stale_keys_are_dropped_on_reload(self):
        store = MemoryDataStore({"extra": True})
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, store=store)
        asyncio.run(plugin.load_settings())
        assert plugin.settings == {"x": 1, "extra": True}

        store.payload = {}
        asyncio.run(plugin.load_settings())

        assert plugin.settings == {"x": 1}

    def test_persisted_nested_dict_replaces_default_nested_dict(
        self, nested_defaults: dict[str, Any]
    ):
        payload = {"editor": {"font_size": 18}}
        plugin = StaticDefaultsPlugin.create_for_testing(nested_defaults, payload=payload)

        asyncio.run(plugin.load_settings())

        # shallow overlay: the default keymap is gone
        assert plugin.settings["editor"] == {"font_size": 18}
        assert plugin.settings["theme"] == "dark"
        assert plugin.settings["recent"] == ["a.md", "b.md"]

    def test_nested_skeleton_without_defaults_survives_reload(self):
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1})
        asyncio.run(plugin.load_settings())
        scratch = {"draft": "text", "inner": {"k": 1}}
        inner = scratch["inner"]
        plugin.settings["scratch"] = scratch

        asyncio.run(plugin.load_settings())

        assert plugin.settings["scratch"] is scratch
        assert scratch == {"inner": {}}
        assert scratch["inner"] is inner

    def test_defaults_are_not_adopted(self, nested_defaults: dict[str, Any]):
        plugin = StaticDefaultsPlugin.create_for_testing(nested_defaults)

        asyncio.run(plugin.load_settings())
        plugin.settings["editor"]["font_size"] = 99
        asyncio.run(plugin.load_settings())

        assert plugin.settings["editor"]["font_size"] == 14
        assert nested_defaults["editor"]["font_size"] == 14

    def test_retrieval_failure_propagates_and_leaves_defaults(self):
        store = ErrorSimulatingDataStore({"x": 5}, fail_on_methods=["load_data"])
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1, "y": 2}, store=store)
        ref = plugin.settings
        ref["old"] = "value"

        with pytest.raises(RetrievalError):
            asyncio.run(plugin.load_settings())

        assert plugin.settings is ref
        assert ref == {"x": 1, "y": 2}

    def test_reads_payload_once_per_load(self):
        store = MemoryDataStore({"y": 2})
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, store=store)

        asyncio.run(plugin.load_settings())

        assert store.load_calls == 1


class TestSharedNestedDicts:
    def test_cached_defaults_survive_repeated_loads(self, manifest: PluginManifest):
        plugin = CachedDefaultsPlugin(manifest, MemoryDataStore())

        asyncio.run(plugin.load_settings())
        asyncio.run(plugin.load_settings())

        assert plugin.settings == {"theme": "dark", "editor": {"font_size": 14}}
        assert CACHED_DEFAULTS == {"theme": "dark", "editor": {"font_size": 14}}

    def test_cached_defaults_not_shared_with_live_settings(self, manifest: PluginManifest):
        plugin = CachedDefaultsPlugin(manifest, MemoryDataStore())
        asyncio.run(plugin.load_settings())

        plugin.settings["editor"]["font_size"] = 20

        assert CACHED_DEFAULTS["editor"]["font_size"] == 14

    def test_nested_payload_survives_repeated_loads(self):
        store = MemoryDataStore({"editor": {"font_size": 18}})
        plugin = StaticDefaultsPlugin.create_for_testing({"editor": {}}, store=store)

        asyncio.run(plugin.load_settings())
        asyncio.run(plugin.load_settings())

        assert plugin.settings == {"editor": {"font_size": 18}}
        assert store.payload == {"editor": {"font_size": 18}}

    def test_external_change_after_load_keeps_nested_payload(self):
        store = MemoryDataStore({"editor": {"font_size": 18}})
        plugin = StaticDefaultsPlugin.create_for_testing({"editor": {}}, store=store)

        asyncio.run(plugin.load_settings())
        asyncio.run(plugin.on_external_settings_change())

        assert plugin.settings == {"editor": {"font_size": 18}}
        assert store.payload == {"editor": {"font_size": 18}}

    def test_overridden_load_data_returning_same_payload(self, manifest: PluginManifest):
        payload = {"b": {"nested": True}}
        plugin = OverridingPlugin(manifest, payload)

        asyncio.run(plugin.load_settings())
        asyncio.run(plugin.load_settings())

        assert plugin.settings == {"a": 1, "b": {"nested": True}}
        assert payload == {"b": {"nested": True}}


class TestResetSettings:
    def test_reset_ignores_persisted_data(self):
        store = MemoryDataStore({"x": 9})
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, store=store)
        asyncio.run(plugin.load_settings())

        plugin.reset_settings()

        assert plugin.settings == {"x": 1}
        assert store.load_calls == 1


class TestSaveSettings:
    def test_passes_live_object(self):
        store = MemoryDataStore()
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, store=store)
        asyncio.run(plugin.load_settings())

        asyncio.run(plugin.save_settings())

        assert_saved_with(store, plugin.settings)
        assert store.payload == {"x": 1}

    def test_save_failure_propagates_and_keeps_settings(self):
        store = ErrorSimulatingDataStore(fail_on_methods=["save_data"])
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, store=store)
        asyncio.run(plugin.load_settings())
        ref = plugin.settings

        with pytest.raises(PersistError):
            asyncio.run(plugin.save_settings())

        assert plugin.settings is ref
        assert ref == {"x": 1}

    def test_saved_values_come_back_on_load(self, tmp_path):
        store = JsonFileStore(tmp_path / "data.json")
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1, "y": 2}, store=store)
        asyncio.run(plugin.load_settings())
        plugin.settings["y"] = 20
        asyncio.run(plugin.save_settings())

        other = StaticDefaultsPlugin.create_for_testing({"x": 1, "y": 2}, store=store)
        asyncio.run(other.load_settings())

        assert other.settings == {"x": 1, "y": 20}


class TestExternalSettingsChange:
    def test_matches_direct_load(self, nested_defaults: dict[str, Any]):
        payload = {"theme": "light", "extra": [1]}
        direct = StaticDefaultsPlugin.create_for_testing(nested_defaults, payload=payload)
        external = StaticDefaultsPlugin.create_for_testing(nested_defaults, payload=payload)

        asyncio.run(direct.load_settings())
        asyncio.run(external.on_external_settings_change())

        assert external.settings == direct.settings

    def test_picks_up_new_persisted_data(self):
        store = MemoryDataStore({"x": 2})
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1}, store=store)
        asyncio.run(plugin.load_settings())
        ref = plugin.settings

        store.payload = {"x": 3}
        asyncio.run(plugin.on_external_settings_change())

        assert plugin.settings is ref
        assert ref == {"x": 3}

    def test_external_change_logs_at_debug(self, caplog: pytest.LogCaptureFixture):
        plugin = StaticDefaultsPlugin.create_for_testing({"x": 1})

        with caplog.at_level(logging.DEBUG, logger="plugsettings.controller"):
            asyncio.run(plugin.on_external_settings_change())

        messages = [r for r in caplog.records if "External settings change" in r.getMessage()]
        assert len(messages) == 1
        assert messages[0].levelno == logging.DEBUG
