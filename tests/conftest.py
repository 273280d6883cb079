"""Shared fixtures: a BotContext wired to a mocked Discord client."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from ticketbot.commands import BotContext, Command, CommandManager
from ticketbot.discord.messages import MessageFormatter
from ticketbot.discord.models import Interaction
from ticketbot.plugin_loader import PluginIndex

APP_ID = "100000000000000001"


class EchoCommand(Command):
    """Minimal concrete command used across tests."""

    async def execute(self, invocation, interaction):
        await self.send_response(interaction, invocation.args.get("text", ""))


def echo_data(**overrides):
    data = {"name": "echo", "description": "Repeat some text"}
    data.update(overrides)
    return data


@pytest.fixture
def http():
    client = MagicMock()
    client.create_command = AsyncMock(return_value={"id": "42"})
    client.create_interaction_response = AsyncMock(return_value=None)
    client.edit_original_response = AsyncMock(return_value={"id": "99"})
    client.close = AsyncMock()
    return client


@pytest.fixture
def plugin_index():
    return PluginIndex()


@pytest.fixture
def ctx(http, plugin_index):
    return BotContext(
        config=MagicMock(),
        http=http,
        commands=CommandManager(http, APP_ID),
        plugins=plugin_index,
        formatter=MessageFormatter(colour=0x009999, footer="Support"),
        application_id=APP_ID,
    )


@pytest.fixture
def interaction():
    return Interaction(
        id="555",
        type=2,
        token="interaction-token",
        channel_id="777",
        guild_id="888",
        member={"user": {"id": "1"}},
        data={
            "name": "echo",
            "options": [{"name": "text", "type": 3, "value": "hello"}],
        },
    )


@pytest.fixture
def tmp_data_dir(tmp_path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def echo_cls():
    return EchoCommand


@pytest.fixture
def make_echo(ctx):
    """Build an EchoCommand on the shared context."""
    def _make(**overrides):
        return EchoCommand(ctx, echo_data(**overrides))
    return _make


@pytest.fixture
def echo(make_echo):
    """An EchoCommand built outside the event loop (publish is queued)."""
    return make_echo()
