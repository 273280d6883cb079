"""Base classes for slash commands.

A command is declared as a plain descriptor and implemented as a
Command subclass. Constructing the subclass validates the descriptor,
registers the command with the CommandManager, links it to the plugin
that declared it and publishes its schema to Discord.

Key classes:
    BotContext: Dependency container passed to every command.
    CommandInvocation: Normalised arguments handed to execute().
    Command: ABC that every slash command extends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import structlog

from ..discord.messages import flags, is_structured
from ..discord.models import CommandData, CommandOption, Interaction, InteractionResponseType

if TYPE_CHECKING:
    from ..config import Config
    from ..discord.http import DiscordHTTPClient
    from ..discord.messages import MessageFormatter
    from ..plugin_loader import PluginIndex
    from .manager import CommandManager

logger = structlog.get_logger("ticketbot.commands")


@dataclass
class BotContext:
    """Dependency container for commands.

    Provides typed access to shared services without coupling commands
    to TicketBot.
    """

    config: "Config"
    http: "DiscordHTTPClient"
    commands: "CommandManager"
    plugins: "PluginIndex"
    formatter: "MessageFormatter"
    application_id: str


@dataclass
class CommandInvocation:
    """Data about a single command invocation."""

    token: str
    args: Dict[str, Any] = field(default_factory=dict)
    channel_id: Optional[str] = None
    guild_id: Optional[str] = None
    member: Optional[Dict[str, Any]] = None

    @classmethod
    def from_interaction(cls, interaction: Interaction) -> "CommandInvocation":
        return cls(
            token=interaction.token,
            args=interaction.arguments(),
            channel_id=interaction.channel_id,
            guild_id=interaction.guild_id,
            member=interaction.member,
        )


class Command(ABC):
    """A slash command.

    Subclasses pass their descriptor to ``super().__init__`` and
    implement execute(). Construction, in order:

    1. Rejects a descriptor that is not a mapping (TypeError).
    2. Looks up the declaring plugin, unless the command is internal.
    3. Validates the descriptor (CommandValidationError propagates).
    4. Registers with the manager. Any error here is logged and
       construction stops: the command is not published.
    5. Schedules the schema publish to Discord.

    Args:
        ctx: Shared BotContext dependency container.
        data: Command descriptor, a mapping or a CommandData. Keys:
            name (3-32), description (1-100), staff_only, permissions,
            options (max 10), internal.
    """

    def __init__(self, ctx: BotContext, data: Union[Mapping, CommandData]):
        self.ctx = ctx
        self.manager = ctx.commands

        if isinstance(data, CommandData):
            raw = data.model_dump()
        elif isinstance(data, Mapping):
            raw = data
        else:
            raise TypeError(f"Expected data to be a mapping, got {type(data).__name__}")

        self.name: str = raw.get("name")
        self.internal: bool = bool(raw.get("internal", False))

        # Non-owning: the plugin name, resolved through the loader's index
        self.plugin: Optional[str] = None
        if not self.internal:
            self.plugin = ctx.plugins.owner_of(self.name)

        self.descriptor: CommandData = self.manager.check(raw)
        self.description: str = self.descriptor.description
        self.staff_only: bool = self.descriptor.staff_only
        self.permissions: List[str] = list(self.descriptor.permissions)
        self.options: List[CommandOption] = list(self.descriptor.options)

        try:
            self.manager.register(self)
        except Exception as e:
            logger.error(
                "command_register_failed",
                command=self.name,
                plugin=self.plugin,
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        self.manager.publish(self)

        logger.info(
            "command_loaded",
            command=self.name,
            internal=self.internal,
            plugin=self.plugin,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} /{self.name}>"

    @abstractmethod
    async def execute(self, invocation: CommandInvocation, interaction: Interaction) -> None:
        """Run the command for one interaction.

        Args:
            invocation: Normalised arguments plus channel, guild, member
                and token of the invocation.
            interaction: The raw interaction.
        """
        ...

    async def defer_response(
        self, interaction: Interaction, secret: bool = False
    ) -> Optional[dict]:
        """Acknowledge now and respond later with edit_response().

        Args:
            interaction: Interaction to acknowledge.
            secret: Make the eventual response ephemeral. Embeds and
                attachments do not render in ephemeral messages.

        Raises:
            DiscordAPIError: If Discord rejects or never receives the
                acknowledgement.
        """
        return await self.ctx.http.create_interaction_response(
            interaction.id,
            interaction.token,
            {
                "type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE.value,
                "flags": flags(secret),
            },
        )

    async def send_response(
        self, interaction: Interaction, content: Any, secret: bool = False
    ) -> Optional[dict]:
        """Send the initial response to an interaction.

        Structured content (embeds, message mappings) goes through the
        MessageFormatter into ``data``; anything else is sent as text.

        Raises:
            DiscordAPIError: If the response could not be delivered.
        """
        payload: Dict[str, Any] = {
            "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE.value,
            "flags": flags(secret),
        }
        if is_structured(content):
            payload["data"] = await self.ctx.formatter.format(interaction.channel_id, content)
        else:
            payload["content"] = content

        return await self.ctx.http.create_interaction_response(
            interaction.id, interaction.token, payload
        )

    async def edit_response(self, interaction: Interaction, content: Any) -> Optional[dict]:
        """Edit the original response, e.g. after defer_response().

        Visibility is fixed by the original response, so no flags are
        sent.

        Returns:
            The edited message object returned by Discord.

        Raises:
            DiscordAPIError: If the edit could not be delivered.
        """
        if is_structured(content):
            message = await self.ctx.formatter.format(interaction.channel_id, content)
            payload = {
                key: message[key] for key in ("components", "allowed_mentions") if key in message
            }
            # Text only replaces the message body when there are no embeds
            if message["embeds"] or "content" not in message:
                payload["embeds"] = message["embeds"]
            else:
                payload["content"] = message["content"]
        else:
            payload = {"content": content}

        return await self.ctx.http.edit_original_response(
            self.ctx.application_id, interaction.token, payload
        )
