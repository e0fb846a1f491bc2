"""DiscordClient: a ChatClient backed by the Discord REST API (v10)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from discord_mcp import __version__
from discord_mcp.chat.errors import RemoteApiError
from discord_mcp.chat.models import Channel, Guild, Member, Message, Role, User

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://discord.com/api/v10"

# Discord caps a single member listing page at 1000 and a message page at 100.
_MEMBER_PAGE_SIZE = 1000
_MESSAGE_PAGE_SIZE = 100


class DiscordClient:
    """Authenticates as a bot and maps REST resources onto chat models.

    Satisfies the :class:`~discord_mcp.chat.client.ChatClient` protocol.

    Usage::

        async with DiscordClient(token) as client:
            me = await client.get_current_user()
            guilds = await client.list_guilds()
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bot {token}",
                "User-Agent": f"DiscordBot (https://github.com/discord-mcp, {__version__})",
            },
            timeout=timeout,
            transport=transport,
        )
        self._me: User | None = None

    async def __aenter__(self) -> DiscordClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # -- users ---------------------------------------------------------------

    async def get_current_user(self) -> User:
        """Return the bot user; the first call also validates the token."""
        if self._me is None:
            self._me = User.model_validate(await self._request("GET", "/users/@me"))
        return self._me

    async def get_user(self, user_id: int) -> User | None:
        data = await self._request("GET", f"/users/{user_id}", allow_missing=True)
        return None if data is None else User.model_validate(data)

    # -- guilds --------------------------------------------------------------

    async def list_guilds(self) -> list[Guild]:
        data = await self._request("GET", "/users/@me/guilds")
        return [Guild.model_validate(item) for item in data]

    async def get_guild(self, guild_id: int) -> Guild | None:
        data = await self._request(
            "GET", f"/guilds/{guild_id}", params={"with_counts": "true"}, allow_missing=True
        )
        return None if data is None else Guild.model_validate(data)

    async def list_guild_channels(self, guild_id: int) -> list[Channel]:
        data = await self._request("GET", f"/guilds/{guild_id}/channels")
        return [Channel.model_validate(item) for item in data]

    async def list_guild_roles(self, guild_id: int) -> list[Role]:
        data = await self._request("GET", f"/guilds/{guild_id}/roles")
        return [Role.model_validate(item) for item in data]

    async def list_guild_members(self, guild_id: int, limit: int = 1000) -> list[Member]:
        """Page through the member list until *limit* members are collected.

        Requires the privileged ``GUILD_MEMBERS`` intent on the application.
        """
        members: list[Member] = []
        after = 0
        while len(members) < limit:
            page_size = min(_MEMBER_PAGE_SIZE, limit - len(members))
            data = await self._request(
                "GET",
                f"/guilds/{guild_id}/members",
                params={"limit": page_size, "after": after},
            )
            page = [Member.model_validate(item) for item in data]
            members.extend(page)
            if len(page) < page_size:
                break
            after = page[-1].user.id
        return members

    async def get_member(self, guild_id: int, user_id: int) -> Member | None:
        data = await self._request(
            "GET", f"/guilds/{guild_id}/members/{user_id}", allow_missing=True
        )
        return None if data is None else Member.model_validate(data)

    # -- channels and messages -----------------------------------------------

    async def get_channel(self, channel_id: int) -> Channel | None:
        data = await self._request("GET", f"/channels/{channel_id}", allow_missing=True)
        return None if data is None else Channel.model_validate(data)

    async def create_dm(self, user_id: int) -> Channel:
        data = await self._request("POST", "/users/@me/channels", json={"recipient_id": str(user_id)})
        return Channel.model_validate(data)

    async def send_message(self, channel_id: int, content: str) -> Message:
        data = await self._request("POST", f"/channels/{channel_id}/messages", json={"content": content})
        return Message.model_validate(data)

    async def get_messages(self, channel_id: int, limit: int) -> list[Message]:
        data = await self._request(
            "GET",
            f"/channels/{channel_id}/messages",
            params={"limit": min(limit, _MESSAGE_PAGE_SIZE)},
        )
        return [Message.model_validate(item) for item in data]

    # -- transport -----------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        allow_missing: bool = False,
    ) -> Any:
        """Perform one API call and return the decoded JSON body.

        Returns ``None`` for a 404 when *allow_missing* is set, and for 204.
        """
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise RemoteApiError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 404 and allow_missing:
            return None
        if response.status_code >= 400:
            raise self._error_from(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_from(response: httpx.Response) -> RemoteApiError:
        """Build a RemoteApiError from Discord's JSON error body when present."""
        message = f"HTTP {response.status_code}"
        code: int | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = str(body.get("message", message))
            raw_code = body.get("code")
            code = raw_code if isinstance(raw_code, int) else None
            if response.status_code == 429 and "retry_after" in body:
                message = f"{message} (retry after {body['retry_after']}s)"
        logger.debug("Discord API error %s: %s", response.status_code, message)
        return RemoteApiError(message, status=response.status_code, code=code)
