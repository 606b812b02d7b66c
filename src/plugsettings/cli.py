"""Plugin settings CLI application.

This module provides a command-line front end for inspecting and editing a
plugin's persisted settings the same way the plugin itself loads them:
defaults first, persisted data on top.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Final

import typer
import yaml
from pydantic import ValidationError

from plugsettings.config import HostConfig
from plugsettings.controller import StaticDefaultsPlugin
from plugsettings.errors import SettingsError
from plugsettings.manifest import PluginManifest
from plugsettings.storage.files import create_store

# ── CLI setup ────────────────────────────────────────────────────────────────
app = typer.Typer(help="Plugin settings CLI", add_completion=False)
config_app = typer.Typer(help="Config helpers")
app.add_typer(config_app, name="config")

logger: Final = logging.getLogger(__name__)  # Will be "plugsettings.cli"

PLUGIN_ID_OPTION = typer.Option(..., "--id", "-i", help="Plugin id (data directory name)")
DEFAULTS_OPTION = typer.Option(
    ..., "--defaults", "-d", exists=True, dir_okay=False, help="YAML file of default settings"
)
CONFIG_OPTION = typer.Option(None, "--config", "-c", dir_okay=False, help="Host config YAML")
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _build_plugin(
    plugin_id: str, defaults: Path, config_path: Path | None, debug: bool
) -> StaticDefaultsPlugin:
    """Resolve host config, manifest and store into a ready plugin."""
    try:
        config = HostConfig.load(config_path)
    except (FileNotFoundError, RuntimeError) as exc:
        raise _fail(str(exc)) from exc

    _configure_logging(debug or config.debug)

    try:
        manifest = PluginManifest(id=plugin_id, name=plugin_id, version="0.0.0")
    except ValidationError as exc:
        raise _fail(f"Invalid plugin id: {plugin_id!r}") from exc

    store = create_store(config, manifest)
    logger.debug("Using %r for %s", store, manifest.id)

    try:
        return StaticDefaultsPlugin.from_yaml(defaults, manifest, store)
    except SettingsError as exc:
        raise _fail(str(exc)) from exc


@app.command()
def show(
    plugin_id: str = PLUGIN_ID_OPTION,
    defaults: Path = DEFAULTS_OPTION,
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Print the effective settings (defaults overlaid with persisted data)."""
    plugin = _build_plugin(plugin_id, defaults, config, debug)
    try:
        asyncio.run(plugin.load_settings())
    except SettingsError as exc:
        raise _fail(str(exc)) from exc
    typer.echo(json.dumps(plugin.settings, indent=2, ensure_ascii=False, default=str))


@app.command()
def reset(
    plugin_id: str = PLUGIN_ID_OPTION,
    defaults: Path = DEFAULTS_OPTION,
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Replace the persisted data with the defaults."""
    plugin = _build_plugin(plugin_id, defaults, config, debug)
    plugin.reset_settings()
    try:
        asyncio.run(plugin.save_settings())
    except SettingsError as exc:
        raise _fail(str(exc)) from exc
    typer.secho(f"Settings for {plugin_id} reset to defaults", fg=typer.colors.GREEN)


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Top-level settings key"),
    value: str = typer.Argument(..., help="New value, parsed as YAML"),
    plugin_id: str = PLUGIN_ID_OPTION,
    defaults: Path = DEFAULTS_OPTION,
    config: Path | None = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Set one top-level key and persist the whole settings object."""
    plugin = _build_plugin(plugin_id, defaults, config, debug)
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise _fail(f"Cannot parse value {value!r}: {exc}") from exc

    async def _update() -> None:
        await plugin.load_settings()
        plugin.settings[key] = parsed
        await plugin.save_settings()

    try:
        asyncio.run(_update())
    except SettingsError as exc:
        raise _fail(str(exc)) from exc
    typer.secho(f"{key} = {json.dumps(parsed, default=str)}", fg=typer.colors.GREEN)


# ───────────────────────── config sub-commands ───────────────────────────────
@config_app.command("validate")
def validate_config(file: Path):
    """Validate a YAML host config file against the schema."""
    try:
        HostConfig.load(file)
        typer.echo("✅ Config valid")
    except (FileNotFoundError, RuntimeError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


# ───────────────────────── module entrypoint ────────────────────────────────
if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)
