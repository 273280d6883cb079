"""Internal slash commands shipped with the bot."""

from typing import List

from ..discord.messages import embed_fields
from ..discord.models import Interaction
from .base import BotContext, Command, CommandInvocation


class PingCommand(Command):
    """/ping: check the bot is answering interactions."""

    def __init__(self, ctx: BotContext):
        super().__init__(ctx, {
            "name": "ping",
            "description": "Check that the bot is responding",
            "internal": True,
        })

    async def execute(self, invocation: CommandInvocation, interaction: Interaction) -> None:
        await self.send_response(interaction, "Pong!", secret=True)


class HelpCommand(Command):
    """/help: list the commands available to the user."""

    def __init__(self, ctx: BotContext):
        super().__init__(ctx, {
            "name": "help",
            "description": "List the available commands",
            "internal": True,
        })

    def _describe(self, command: Command) -> str:
        text = command.description
        if command.staff_only:
            text += " *(staff only)*"
        if command.plugin:
            text += f" `[{command.plugin}]`"
        return text

    async def execute(self, invocation: CommandInvocation, interaction: Interaction) -> None:
        await self.defer_response(interaction, secret=True)
        commands = sorted(self.manager, key=lambda c: c.name)
        fields = embed_fields({f"/{c.name}": self._describe(c) for c in commands})
        await self.edit_response(interaction, {
            "embed": {
                "title": "Commands",
                "fields": fields[:25],
            },
        })


def load_internal_commands(ctx: BotContext) -> List[Command]:
    """Construct (and so register and publish) the built-in commands."""
    return [PingCommand(ctx), HelpCommand(ctx)]
