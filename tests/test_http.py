"""Tests for the Discord REST client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from ticketbot.discord.http import DiscordHTTPClient
from ticketbot.exceptions import DiscordAPIError, ErrorCategory

API = "https://discord.test/api/v10"


class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside ``async with``."""

    def __init__(self, status=200, json_data=None, text="", content_length=None):
        self.status = status
        self._json = json_data
        self._text = text
        self.content_length = content_length

    async def json(self):
        return self._json

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def _make_client(response=None, exc=None):
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if exc is not None:
        session.request.side_effect = exc
    else:
        session.request.return_value = response
    return DiscordHTTPClient("bot-token", api_url=API + "/", timeout=5, session=session), session


@pytest.mark.asyncio
async def test_create_command_posts_with_bot_auth():
    client, session = _make_client(FakeResponse(201, {"id": "42"}))
    result = await client.create_command("1", {"name": "new"})

    assert result == {"id": "42"}
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "POST"
    assert url == f"{API}/applications/1/commands"
    assert kwargs["json"] == {"name": "new"}
    assert kwargs["headers"]["Authorization"] == "Bot bot-token"


@pytest.mark.asyncio
async def test_interaction_callback_route_without_auth():
    client, session = _make_client(FakeResponse(204))
    assert await client.create_interaction_response("5", "tok", {"type": 5}) is None

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == f"{API}/interactions/5/tok/callback"
    assert "Authorization" not in session.request.call_args.kwargs["headers"]


@pytest.mark.asyncio
async def test_interaction_callback_returns_body():
    client, _ = _make_client(FakeResponse(200, {"interaction": {"id": "5"}}))
    result = await client.create_interaction_response("5", "tok", {"type": 4})
    assert result == {"interaction": {"id": "5"}}


@pytest.mark.asyncio
async def test_edit_original_response_route():
    client, session = _make_client(FakeResponse(200, {"id": "9"}))
    assert await client.edit_original_response("1", "tok", {"content": "x"}) == {"id": "9"}

    method, url = session.request.call_args.args
    assert method == "PATCH"
    assert url == f"{API}/webhooks/1/tok/messages/@original"


@pytest.mark.asyncio
async def test_empty_body_returns_none():
    client, _ = _make_client(FakeResponse(200, content_length=0))
    assert await client.request("GET", "/gateway") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status,category", [
    (400, ErrorCategory.PERMANENT),
    (404, ErrorCategory.PERMANENT),
    (429, ErrorCategory.TRANSIENT),
    (502, ErrorCategory.TRANSIENT),
])
async def test_error_status_raises(status, category):
    client, _ = _make_client(FakeResponse(status, text='{"message": "nope"}'))
    with pytest.raises(DiscordAPIError) as exc_info:
        await client.create_command("1", {"name": "new"})

    err = exc_info.value
    assert err.status == status
    assert err.category == category
    assert err.method == "POST"
    assert err.route == "/applications/1/commands"


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [
    aiohttp.ClientConnectionError("connection reset"),
    asyncio.TimeoutError(),
])
async def test_network_failure_is_transient(exc):
    client, _ = _make_client(exc=exc)
    with pytest.raises(DiscordAPIError) as exc_info:
        await client.request("POST", "/applications/1/commands", json={})

    err = exc_info.value
    assert err.status is None
    assert err.is_retryable
    assert err.__cause__ is exc


@pytest.mark.asyncio
async def test_close_closes_session():
    client, session = _make_client(FakeResponse())
    await client.close()
    session.close.assert_awaited_once()
    # Second close is a no-op
    await client.close()
    session.close.assert_awaited_once()
