"""Plugin loader: resolves import paths and reads YAML plugin manifests."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from plugweave.exceptions import ConfigError, PluginLoadError
from plugweave.plugins.base import Plugin, PluginMeta

if TYPE_CHECKING:
    from plugweave.core.config import PlugweaveConfig

logger = structlog.get_logger()


class PluginManifest(BaseModel):
    """Contents of a plugin manifest file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    plugins: list[str] = []


def load_plugin(path: str) -> Plugin:
    """Import ``package.module:attribute`` and return it as a plugin.

    Classes are instantiated with no arguments; any other object is used
    as-is. Raises ``PluginLoadError`` if the path is malformed, the import
    fails, or the result has no ``PluginMeta``.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise PluginLoadError(f"Plugin path must look like 'module:attribute': {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PluginLoadError(f"Cannot import plugin module {module_name}: {e}") from e

    obj: object = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise PluginLoadError(f"{module_name} has no attribute {attr}") from None

    if isinstance(obj, type):
        try:
            obj = obj()
        except Exception as e:
            raise PluginLoadError(f"Cannot instantiate plugin {path}: {e}") from e

    if not isinstance(obj, Plugin) or not isinstance(obj.meta, PluginMeta):
        raise PluginLoadError(f"{path} is not a plugin (missing PluginMeta)")

    logger.debug("plugin_loaded", path=path, name=obj.meta.name)
    return obj


def load_manifest(path: Path) -> list[str]:
    """Read the plugin import paths listed in a YAML manifest."""
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read plugin manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Plugin manifest {path} must be a mapping")
    try:
        manifest = PluginManifest(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid plugin manifest {path}: {e}") from e

    logger.info("manifest_loaded", path=str(path), plugin_count=len(manifest.plugins))
    return manifest.plugins


def load_plugins(config: PlugweaveConfig) -> list[Plugin]:
    """Load the configured plugins, then the manifest's, in order."""
    paths = list(config.plugins)
    if config.manifest is not None:
        paths.extend(load_manifest(config.manifest))
    return [load_plugin(p) for p in paths]
