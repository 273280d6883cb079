"""Discord API client, payload models and message helpers."""

from .http import DiscordHTTPClient
from .messages import EPHEMERAL, MessageFormatter, flags, is_structured
from .models import (
    CommandData,
    CommandOption,
    CommandOptionChoice,
    CommandOptionType,
    Interaction,
    InteractionResponseType,
)

__all__ = [
    "CommandData",
    "CommandOption",
    "CommandOptionChoice",
    "CommandOptionType",
    "DiscordHTTPClient",
    "EPHEMERAL",
    "Interaction",
    "InteractionResponseType",
    "MessageFormatter",
    "flags",
    "is_structured",
]
