"""Slash command framework for ticketbot.

Provides the Command ABC, BotContext dependency container and the
CommandManager that validates, registers and publishes commands.
"""

from .base import BotContext, Command, CommandInvocation
from .manager import CommandManager

__all__ = [
    "BotContext",
    "Command",
    "CommandInvocation",
    "CommandManager",
]
