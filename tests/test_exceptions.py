"""Tests for the exception hierarchy."""

from ticketbot.exceptions import (
    CommandConflictError,
    CommandError,
    CommandValidationError,
    ConfigurationError,
    DiscordAPIError,
    ErrorCategory,
    PluginError,
    TicketBotError,
)


def test_hierarchy():
    assert issubclass(CommandValidationError, CommandError)
    assert issubclass(CommandConflictError, CommandError)
    for cls in (CommandError, DiscordAPIError, PluginError, ConfigurationError):
        assert issubclass(cls, TicketBotError)


def test_str_includes_module_and_context():
    err = CommandConflictError("already registered", command="close", existing="CloseCommand")
    text = str(err)
    assert text.startswith("already registered")
    assert "[module=commands.manager]" in text
    assert "existing=CloseCommand" in text
    assert err.command == "close"


def test_retryable_only_when_transient():
    assert DiscordAPIError("429", status=429, category=ErrorCategory.TRANSIENT).is_retryable
    assert not DiscordAPIError("400", status=400).is_retryable
    assert ConfigurationError("no token").category == ErrorCategory.INFRASTRUCTURE


def test_repr():
    err = PluginError("no class", plugin="faq")
    assert repr(err) == "PluginError('no class', category='permanent', module='plugins')"
