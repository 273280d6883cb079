"""Command registry and publisher.

CommandManager validates descriptors, keeps registered commands by
name and publishes their schema to Discord. Publishing runs in
supervised tasks: failures are logged and recorded in ``failed``
instead of disappearing with an unawaited request.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Set

import structlog
from pydantic import ValidationError

from ..discord.models import CommandData
from ..exceptions import CommandConflictError, CommandValidationError, DiscordAPIError

if TYPE_CHECKING:
    from ..discord.http import DiscordHTTPClient
    from .base import Command

logger = structlog.get_logger("ticketbot.commands")


class CommandManager:
    """Validates, registers and publishes slash commands.

    Args:
        http: Client used to publish command definitions.
        application_id: Discord application the commands belong to.
    """

    def __init__(self, http: "DiscordHTTPClient", application_id: str):
        self._http = http
        self._application_id = application_id
        self._commands: Dict[str, "Command"] = {}
        self._unpublished: List["Command"] = []
        self._tasks: Set[asyncio.Task] = set()
        self.failed: Dict[str, DiscordAPIError] = {}

    def check(self, data: Mapping) -> CommandData:
        """Validate a command descriptor.

        Raises:
            CommandValidationError: If the descriptor does not match the
                slash command schema.
        """
        try:
            return CommandData.model_validate(dict(data))
        except ValidationError as e:
            name = data.get("name")
            raise CommandValidationError(
                f"Invalid descriptor for command {name!r}",
                command=name if isinstance(name, str) else None,
                errors=e.errors(include_url=False),
            ) from e

    def register(self, command: "Command") -> None:
        """Store a command under its name.

        Raises:
            CommandConflictError: If the name is already taken.
        """
        existing = self._commands.get(command.name)
        if existing is not None:
            raise CommandConflictError(
                f"A command named {command.name!r} is already registered",
                command=command.name,
                existing=type(existing).__name__,
            )
        self._commands[command.name] = command
        logger.debug("command_registered", command=command.name)

    def get(self, name: str) -> Optional["Command"]:
        """Look up a registered command by name."""
        return self._commands.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator["Command"]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def names(self) -> frozenset:
        """All registered command names."""
        return frozenset(self._commands.keys())

    def publish(self, command: "Command") -> Optional[asyncio.Task]:
        """Publish a command's schema to Discord.

        Inside a running event loop this starts a supervised task and
        returns it. Otherwise the command is queued until flush().
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._unpublished.append(command)
            logger.debug("command_publish_queued", command=command.name)
            return None

        task = loop.create_task(self._publish(command), name=f"publish:{command.name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _publish(self, command: "Command") -> Optional[dict]:
        try:
            result = await self._http.create_command(
                self._application_id, command.descriptor.to_payload()
            )
        except DiscordAPIError as e:
            self.failed[command.name] = e
            logger.error(
                "command_publish_failed",
                command=command.name,
                status=e.status,
                retryable=e.is_retryable,
                error=str(e),
            )
            return None

        self.failed.pop(command.name, None)
        logger.info(
            "command_published",
            command=command.name,
            command_id=result.get("id") if isinstance(result, dict) else None,
        )
        return result

    async def flush(self) -> List[str]:
        """Publish queued commands and wait for in-flight publishes.

        Returns:
            Names of commands whose publish failed.
        """
        queued, self._unpublished = self._unpublished, []
        for command in queued:
            await self._publish(command)

        if self._tasks:
            await asyncio.gather(*list(self._tasks))

        return sorted(self.failed)
