"""Custom exception hierarchy for ticketbot.

Classifies failures across the command layer so callers can decide
whether to log, retry, or surface them.

A descriptor that is not a mapping raises the builtin TypeError;
everything raised by the command layer itself derives from
TicketBotError.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for retry decisions."""
    TRANSIENT = "transient"          # Worth retrying (rate limit, 5xx, network)
    PERMANENT = "permanent"          # Not worth retrying (bad schema, 4xx)
    INFRASTRUCTURE = "infrastructure"  # Missing token, env issues


class TicketBotError(Exception):
    """Base exception for all ticketbot errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification for retry/escalation decisions.
        module: Originating module name (e.g. "commands.manager").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether this error is worth retrying."""
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


# ---------------------------------------------------------------------------
# Command exceptions
# ---------------------------------------------------------------------------

class CommandError(TicketBotError):
    """Error while building or registering a command.

    Attributes:
        command: Name of the command involved (if known).
    """

    def __init__(
        self,
        message: str = "",
        *,
        command: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command = command
        super().__init__(
            message, category=category, module=module or "commands", **context
        )


class CommandValidationError(CommandError):
    """The command descriptor failed schema validation."""

    def __init__(
        self,
        message: str = "",
        *,
        command: Optional[str] = None,
        errors: Optional[list] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.errors = errors or []
        super().__init__(
            message,
            command=command,
            category=category,
            module=module or "commands.manager",
            **context,
        )


class CommandConflictError(CommandError):
    """A command with the same name is already registered."""

    def __init__(
        self,
        message: str = "",
        *,
        command: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message,
            command=command,
            category=category,
            module=module or "commands.manager",
            **context,
        )


# ---------------------------------------------------------------------------
# Discord API exceptions
# ---------------------------------------------------------------------------

class DiscordAPIError(TicketBotError):
    """A request to the Discord REST API failed.

    Attributes:
        status: HTTP status code, or None for network-level failures.
        method: HTTP method of the failed request.
        route: API route (relative to the base URL).
    """

    def __init__(
        self,
        message: str = "",
        *,
        status: Optional[int] = None,
        method: Optional[str] = None,
        route: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.status = status
        self.method = method
        self.route = route
        super().__init__(
            message, category=category, module=module or "discord.http", **context
        )


# ---------------------------------------------------------------------------
# Plugin exceptions
# ---------------------------------------------------------------------------

class PluginError(TicketBotError):
    """Error while loading or running a plugin."""

    def __init__(
        self,
        message: str = "",
        *,
        plugin: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.plugin = plugin
        super().__init__(
            message, category=category, module=module or "plugins", **context
        )


# ---------------------------------------------------------------------------
# Configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(TicketBotError):
    """Invalid or missing configuration.

    Defaults to INFRASTRUCTURE because config issues are environmental
    and won't resolve by retrying.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )
