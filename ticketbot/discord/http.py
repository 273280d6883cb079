"""Discord REST API client.

A thin aiohttp wrapper covering the routes the command layer needs:
publishing command definitions and answering interactions. Every call
is awaited by its caller and failures raise DiscordAPIError, so the
caller decides whether to log, retry, or surface them.

Key classes:
    DiscordHTTPClient: Authenticated JSON client for the Discord API.
"""

import asyncio
from typing import Any, Optional

import aiohttp
import structlog

from ..config import DEFAULT_API_URL
from ..exceptions import DiscordAPIError, ErrorCategory

logger = structlog.get_logger("ticketbot.http")


class DiscordHTTPClient:
    """Authenticated JSON client for the Discord REST API.

    Args:
        token: Bot token, sent as ``Authorization: Bot <token>``.
        api_url: Versioned API base URL.
        timeout: Total timeout per request in seconds.
        session: Optional pre-built session (otherwise created lazily).
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create a shared aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        """Close the shared HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _build_headers(self, auth: bool) -> dict:
        headers = {"Content-Type": "application/json"}
        if auth:
            headers["Authorization"] = f"Bot {self.token}"
        return headers

    async def request(
        self,
        method: str,
        route: str,
        *,
        json: Optional[dict] = None,
        auth: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns:
            The parsed JSON response, or None for an empty body.

        Raises:
            DiscordAPIError: On a non-2xx status (TRANSIENT for 429 and
                5xx, PERMANENT otherwise) or a network failure
                (TRANSIENT).
        """
        url = f"{self.api_url}{route}"
        try:
            session = await self._get_session()
            async with session.request(
                method,
                url,
                json=json,
                headers=self._build_headers(auth),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if 200 <= resp.status < 300:
                    logger.debug("discord_api_ok", method=method, route=route, status=resp.status)
                    if resp.status == 204 or resp.content_length == 0:
                        return None
                    return await resp.json()

                body = await resp.text()
                category = (
                    ErrorCategory.TRANSIENT
                    if resp.status == 429 or resp.status >= 500
                    else ErrorCategory.PERMANENT
                )
                logger.warning(
                    "discord_api_error",
                    method=method,
                    route=route,
                    status=resp.status,
                    body=body[:200],
                )
                raise DiscordAPIError(
                    f"Discord API returned {resp.status}",
                    status=resp.status,
                    method=method,
                    route=route,
                    category=category,
                    body=body[:200],
                )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "discord_api_unreachable",
                method=method,
                route=route,
                error=str(e) or type(e).__name__,
            )
            raise DiscordAPIError(
                f"Request to Discord failed: {type(e).__name__}",
                method=method,
                route=route,
                category=ErrorCategory.TRANSIENT,
            ) from e

    async def create_command(self, application_id: str, payload: dict) -> dict:
        """Create (or overwrite) a global application command."""
        return await self.request(
            "POST", f"/applications/{application_id}/commands", json=payload
        )

    async def create_interaction_response(
        self, interaction_id: str, token: str, payload: dict
    ) -> Optional[dict]:
        """Send the initial response to an interaction.

        Interaction routes are authorised by the token in the URL.
        """
        return await self.request(
            "POST",
            f"/interactions/{interaction_id}/{token}/callback",
            json=payload,
            auth=False,
        )

    async def edit_original_response(
        self, application_id: str, token: str, payload: dict
    ) -> Optional[dict]:
        """Edit the initial response (or the message following a deferral)."""
        return await self.request(
            "PATCH",
            f"/webhooks/{application_id}/{token}/messages/@original",
            json=payload,
            auth=False,
        )
