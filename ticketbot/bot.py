"""TicketBot: wires the command layer together.

Builds the Discord HTTP client, CommandManager, PluginLoader and
MessageFormatter, loads internal and plugin commands, and publishes
their definitions to Discord.
"""

import asyncio
from typing import List, Optional

import structlog

from .commands.base import BotContext, Command
from .commands.core import load_internal_commands
from .commands.manager import CommandManager
from .config import Config, get_config
from .discord.http import DiscordHTTPClient
from .discord.messages import MessageFormatter
from .exceptions import CommandValidationError, ConfigurationError
from .plugin_loader import PluginLoader

logger = structlog.get_logger("ticketbot.bot")


class TicketBot:
    """Slash-command host for the ticket bot.

    Args:
        config: Config instance. Defaults to the global config.

    Raises:
        ConfigurationError: If the bot token or application id is missing.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

        if not self.config.discord_token:
            raise ConfigurationError("DISCORD_TOKEN is not set", setting_name="DISCORD_TOKEN")
        if not self.config.application_id:
            raise ConfigurationError(
                "DISCORD_APPLICATION_ID is not set", setting_name="DISCORD_APPLICATION_ID"
            )

        self.http = DiscordHTTPClient(
            token=self.config.discord_token,
            api_url=self.config.discord_api_url,
            timeout=self.config.http_timeout,
        )
        self.commands = CommandManager(self.http, self.config.application_id)
        self.plugin_loader = PluginLoader(
            plugins_dir=self.config.plugins_dir,
            settings=self.config.settings,
            data_dir=self.config.data_dir / "plugins",
        )
        self.formatter = MessageFormatter(
            colour=self.config.embed_colour,
            footer=self.config.embed_footer,
        )
        self.ctx = BotContext(
            config=self.config,
            http=self.http,
            commands=self.commands,
            plugins=self.plugin_loader.index,
            formatter=self.formatter,
            application_id=self.config.application_id,
        )
        self.running = False
        self._stopped: Optional[asyncio.Event] = None

    def load_commands(self) -> List[Command]:
        """Construct internal commands, then every plugin's commands.

        A malformed or invalid descriptor only skips that command.
        """
        loaded = load_internal_commands(self.ctx)
        for plugin_name, cls in self.plugin_loader.get_command_classes():
            try:
                loaded.append(cls(self.ctx))
            except (TypeError, CommandValidationError) as e:
                logger.error(
                    "command_load_failed",
                    plugin=plugin_name,
                    command_class=cls.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return loaded

    async def start(self):
        """Load plugins and commands, then publish command definitions."""
        self._stopped = asyncio.Event()
        self.plugin_loader.discover_and_load()
        loaded = self.load_commands()
        await self.plugin_loader.start_all()

        failed = await self.commands.flush()
        if failed:
            logger.warning("commands_not_published", commands=failed)

        self.running = True
        logger.info(
            "bot_started",
            commands=len(self.commands),
            constructed=len(loaded),
            plugins=len(self.plugin_loader.plugins),
        )

    async def run(self):
        """Start, then wait until stop() is called."""
        await self.start()
        await self._stopped.wait()

    async def stop(self):
        """Stop plugins and close the HTTP session."""
        self.running = False
        await self.plugin_loader.stop_all()
        await self.http.close()
        if self._stopped is not None:
            self._stopped.set()
        logger.info("bot_stopped")
