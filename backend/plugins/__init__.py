"""Plugin system for autodiscovery and route registration under /api."""

import importlib
from pathlib import Path

from fastapi import APIRouter
from structlog import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api"


class PluginBase:
    """A discovered plugin: its router plus the endpoint lines listed in its __init__.py."""

    def __init__(self, name: str, router: APIRouter, endpoints: list[str]):
        self.name = name
        self.router = router
        self.endpoints = endpoints


class PluginDiscovery:
    """Finds every ``<plugins_dir>/<name>/endpoint.py`` and mounts it at ``/api/<name>``."""

    def __init__(self, plugins_dir: Path | None = None):
        self.plugins_dir = plugins_dir or Path(__file__).parent
        self.discovered_plugins: dict[str, PluginBase] = {}

    def discover_plugins(self) -> dict[str, PluginBase]:
        """Discover all valid plugins in the plugins directory, in name order."""
        if not self.plugins_dir.exists():
            logger.warning("Plugins directory does not exist", path=str(self.plugins_dir))
            return {}

        for endpoint_file in sorted(self.plugins_dir.glob("*/endpoint.py")):
            plugin_name = endpoint_file.parent.name
            if plugin_name.startswith("_"):
                continue

            plugin = self._load_plugin(plugin_name)
            if plugin:
                self.discovered_plugins[plugin_name] = plugin

        return self.discovered_plugins

    def _load_plugin(self, plugin_name: str) -> PluginBase | None:
        """Load a single plugin package by name."""
        package = f"{__name__}.{plugin_name}"
        module = importlib.import_module(f"{package}.endpoint")

        router = getattr(module, "router", None)
        if not isinstance(router, APIRouter):
            logger.warning("No valid router found in plugin", plugin=plugin_name)
            return None

        metadata = getattr(importlib.import_module(package), "PLUGIN_METADATA", {})
        return PluginBase(plugin_name, router, list(metadata.get("endpoints", [])))

    def register_plugins(self, app) -> None:
        """Register all discovered plugins with the FastAPI app."""
        for plugin_name, plugin in self.discovered_plugins.items():
            app.include_router(
                plugin.router, prefix=f"{API_PREFIX}/{plugin_name}", tags=[plugin_name.title()]
            )
            logger.info("Registered plugin routes", plugin=plugin_name)

    def available_endpoints(self) -> list[str]:
        """Human-readable summary of every registered endpoint, used by the 404 body."""
        return [
            line
            for plugin in self.discovered_plugins.values()
            for line in plugin.endpoints
        ]


def init_plugins(app) -> PluginDiscovery:
    """Initialize plugin system and register all discovered plugins."""
    plugin_discovery = PluginDiscovery()
    plugins = plugin_discovery.discover_plugins()
    plugin_discovery.register_plugins(app)

    logger.info("Plugin system initialized", plugin_count=len(plugins))
    return plugin_discovery
