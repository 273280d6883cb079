"""Plugin base class and context for ticketbot extensibility."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Type

import structlog

if TYPE_CHECKING:
    from .commands.base import Command


class PluginContext:
    """Interface exposed to plugins for interacting with the bot.

    Plugins receive this in their constructor. They should never
    import bot.py directly.
    """

    def __init__(
        self,
        plugin_name: str,
        settings: dict,
        data_dir: Path,
    ):
        self.plugin_name = plugin_name
        # Only expose the plugin's own config section, not full settings
        plugin_settings = settings.get("plugins", {}).get(plugin_name, {})
        self._plugin_settings = plugin_settings if isinstance(plugin_settings, dict) else {}
        self.data_dir = data_dir
        self.logger = structlog.get_logger("ticketbot.plugins").bind(plugin=plugin_name)

    def get_config(self, key: str, default: Any = None) -> Any:
        """Read a value from plugins.<plugin_name>.<key> in settings.yaml."""
        return self._plugin_settings.get(key, default)

    def get_env(self, key: str) -> Optional[str]:
        """Read an environment variable."""
        return os.environ.get(key)

    @property
    def enabled(self) -> bool:
        """Whether this plugin is enabled in config (default True)."""
        return self._plugin_settings.get("enabled", True)


class TicketPlugin:
    """Base class for all ticketbot plugins.

    Subclass this, list the slash commands the plugin provides in
    ``commands`` and return their classes from command_classes().
    Place your plugin in plugins/<name>/plugin.py.
    """

    name: str = ""
    description: str = ""
    version: str = "1.0.0"
    commands: Tuple[str, ...] = ()

    def __init__(self, ctx: PluginContext):
        self.ctx = ctx

    def command_classes(self) -> List[Type["Command"]]:
        """Return Command subclasses to build with the bot's BotContext.

        Each class is constructed as ``cls(bot_context)``.
        """
        return []

    async def on_start(self) -> None:
        """Called after commands are loaded. Initialize resources."""
        pass

    async def on_stop(self) -> None:
        """Called during shutdown. Clean up resources."""
        pass
