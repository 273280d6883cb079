"""Plugin discovery, loading, and lifecycle management."""

import importlib.util
import re
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type

import structlog

from .commands.base import Command
from .exceptions import PluginError
from .plugin_base import PluginContext, TicketPlugin

logger = structlog.get_logger("ticketbot.plugins")

_COMMAND_NAME = re.compile(r"^[-_a-z0-9]{3,32}$")


class PluginIndex:
    """Maps command names to the plugin that declared them.

    The index stores plugin names, not plugin objects, so a command
    never holds a reference to its plugin. The first plugin to declare
    a name owns it.
    """

    def __init__(self):
        self._owners: Dict[str, str] = {}
        self._plugins: Dict[str, TicketPlugin] = {}

    def add(self, plugin_name: str, plugin: TicketPlugin, commands: List[str]) -> List[str]:
        """Index a plugin and its declared commands.

        Returns:
            Names that were already owned by another plugin and were
            skipped.
        """
        self._plugins[plugin_name] = plugin
        conflicts = []
        for cmd_name in commands:
            owner = self._owners.get(cmd_name)
            if owner is not None and owner != plugin_name:
                logger.warning(
                    "plugin_command_conflict",
                    command=cmd_name,
                    plugin=plugin_name,
                    owner=owner,
                )
                conflicts.append(cmd_name)
                continue
            self._owners[cmd_name] = plugin_name
        return conflicts

    def owner_of(self, command_name: str) -> Optional[str]:
        """Name of the plugin that declared ``command_name``, if any."""
        if not isinstance(command_name, str):
            return None
        return self._owners.get(command_name)

    def get(self, plugin_name: str) -> Optional[TicketPlugin]:
        return self._plugins.get(plugin_name)

    @property
    def plugins(self) -> Dict[str, TicketPlugin]:
        return dict(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)


class PluginLoader:
    """Discovers, loads, and manages the lifecycle of ticketbot plugins."""

    def __init__(
        self,
        plugins_dir: Path,
        settings: dict,
        data_dir: Path,
    ):
        self.plugins_dir = plugins_dir
        self._settings = settings
        self._data_dir = data_dir
        self.plugins: List[TicketPlugin] = []
        self.index = PluginIndex()

    def discover_and_load(self) -> None:
        """Scan plugins_dir for plugin.py files and load them."""
        if not self.plugins_dir.is_dir():
            logger.info("plugin_loader_no_dir", path=str(self.plugins_dir))
            return

        # Plugin allowlist: if configured, only load listed plugins
        allowlist = self._settings.get("plugin_allowlist")
        if allowlist is not None and not isinstance(allowlist, list):
            logger.error("plugin_allowlist_invalid_type", type=type(allowlist).__name__)
            allowlist = None

        for plugin_dir in sorted(self.plugins_dir.iterdir()):
            if not plugin_dir.is_dir():
                continue
            plugin_file = plugin_dir / "plugin.py"
            if not plugin_file.is_file():
                continue

            plugin_name = plugin_dir.name

            if allowlist is not None and plugin_name not in allowlist:
                logger.warning(
                    "plugin_blocked_not_in_allowlist",
                    plugin=plugin_name,
                    allowlist=allowlist,
                )
                continue

            try:
                self._load_plugin(plugin_name, plugin_file)
            except Exception as e:
                logger.error(
                    "plugin_load_failed",
                    plugin=plugin_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        logger.info(
            "plugin_loader_complete",
            plugins_loaded=len(self.plugins),
        )

    def _load_plugin(self, plugin_name: str, plugin_file: Path) -> None:
        """Load a single plugin from its plugin.py file."""
        plugin_config = self._settings.get("plugins", {}).get(plugin_name, {})
        if isinstance(plugin_config, dict) and plugin_config.get("enabled") is False:
            logger.info("plugin_skipped_disabled", plugin=plugin_name)
            return

        module_name = f"ticketbot_plugins.{plugin_name}"
        spec = importlib.util.spec_from_file_location(module_name, plugin_file)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            raise

        plugin_cls = None
        for attr in module.__dict__.values():
            if (
                isinstance(attr, type)
                and issubclass(attr, TicketPlugin)
                and attr is not TicketPlugin
                and attr.__module__ == module_name
            ):
                plugin_cls = attr
                break

        if plugin_cls is None:
            raise PluginError("No TicketPlugin subclass found", plugin=plugin_name)

        ctx = PluginContext(
            plugin_name=plugin_name,
            settings=self._settings,
            data_dir=self._data_dir / plugin_name,
        )
        plugin = plugin_cls(ctx)

        declared = []
        for cmd_name in plugin.commands:
            if not isinstance(cmd_name, str) or not _COMMAND_NAME.match(cmd_name):
                logger.warning("plugin_invalid_command_name", command=cmd_name, plugin=plugin_name)
                continue
            declared.append(cmd_name)

        self.plugins.append(plugin)
        self.index.add(plugin_name, plugin, declared)

        logger.info(
            "plugin_loaded",
            plugin=plugin_name,
            version=plugin.version,
            commands=declared,
        )

    async def start_all(self) -> None:
        """Call on_start() on all loaded plugins."""
        for plugin in self.plugins:
            try:
                await plugin.on_start()
                logger.info("plugin_started", plugin=plugin.name or type(plugin).__name__)
            except Exception as e:
                logger.error(
                    "plugin_start_failed",
                    plugin=plugin.name or type(plugin).__name__,
                    error=str(e),
                )

    async def stop_all(self) -> None:
        """Call on_stop() on all loaded plugins (reverse order)."""
        for plugin in reversed(self.plugins):
            try:
                await plugin.on_stop()
                logger.info("plugin_stopped", plugin=plugin.name or type(plugin).__name__)
            except Exception as e:
                logger.error(
                    "plugin_stop_failed",
                    plugin=plugin.name or type(plugin).__name__,
                    error=str(e),
                )

    def get_command_classes(self) -> List[Tuple[str, Type[Command]]]:
        """Return (plugin_name, Command subclass) pairs from all plugins."""
        classes = []
        for plugin in self.plugins:
            plugin_name = plugin.ctx.plugin_name
            try:
                provided = plugin.command_classes()
            except Exception as e:
                logger.error(
                    "plugin_command_classes_failed",
                    plugin=plugin_name,
                    error=str(e),
                )
                continue
            for cls in provided:
                if isinstance(cls, type) and issubclass(cls, Command):
                    classes.append((plugin_name, cls))
                else:
                    logger.warning("plugin_invalid_command_class", plugin=plugin_name, value=repr(cls))
        return classes
