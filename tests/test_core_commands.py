"""Tests for the internal /ping and /help commands."""

import pytest

from ticketbot.commands import CommandInvocation
from ticketbot.commands.core import HelpCommand, PingCommand, load_internal_commands
from ticketbot.discord.messages import EPHEMERAL


def test_load_internal_commands(ctx):
    loaded = load_internal_commands(ctx)
    assert [type(c) for c in loaded] == [PingCommand, HelpCommand]
    assert all(c.internal for c in loaded)
    assert ctx.commands.names == frozenset({"ping", "help"})


@pytest.mark.asyncio
async def test_ping_replies_ephemerally(ctx, http, interaction):
    ping = PingCommand(ctx)
    await ctx.commands.flush()
    await ping.execute(CommandInvocation.from_interaction(interaction), interaction)

    payload = http.create_interaction_response.await_args.args[2]
    assert payload == {"type": 4, "flags": EPHEMERAL, "content": "Pong!"}


@pytest.mark.asyncio
async def test_help_defers_then_lists_commands(ctx, http, make_echo, plugin_index, interaction):
    plugin_index.add("faq", object(), ["echo"])
    make_echo(staff_only=True)
    help_cmd = HelpCommand(ctx)
    await ctx.commands.flush()

    await help_cmd.execute(CommandInvocation.from_interaction(interaction), interaction)

    deferred = http.create_interaction_response.await_args.args[2]
    assert deferred == {"type": 5, "flags": EPHEMERAL}

    payload = http.edit_original_response.await_args.args[2]
    fields = payload["embeds"][0]["fields"]
    assert [f["name"] for f in fields] == ["/echo", "/help"]
    assert "staff only" in fields[0]["value"]
    assert "[faq]" in fields[0]["value"]
