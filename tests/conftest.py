"""Shared builders and fakes for the test suite."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

from discord_mcp.chat.client import ChatClient
from discord_mcp.chat.models import Channel, Guild, Member, Message, PermissionOverwrite, Role, User
from discord_mcp.chat.permissions import Permission
from discord_mcp.tools.base import ToolContext

GUILD_ID = 1
CHANNEL_ID = 10
BOT_ID = 500
OWNER_ID = 999

DEFAULT_PERMS = Permission.VIEW_CHANNEL | Permission.SEND_MESSAGES | Permission.READ_MESSAGE_HISTORY


def make_user(user_id: int = 100, username: str = "alice", **extra: Any) -> User:
    return User(id=user_id, username=username, **extra)


def make_role(role_id: int, name: str, permissions: int = 0, **extra: Any) -> Role:
    return Role(id=role_id, name=name, permissions=int(permissions), **extra)


def make_guild(
    guild_id: int = GUILD_ID,
    *,
    name: str = "Test Server",
    everyone: int = DEFAULT_PERMS,
    roles: list[Role] | None = None,
    **extra: Any,
) -> Guild:
    """A guild whose ``@everyone`` role (id == guild id) grants *everyone*."""
    all_roles = [make_role(guild_id, "@everyone", everyone), *(roles or [])]
    extra.setdefault("owner_id", OWNER_ID)
    return Guild(id=guild_id, name=name, roles=all_roles, **extra)


def make_channel(
    channel_id: int = CHANNEL_ID,
    *,
    guild_id: int | None = GUILD_ID,
    type: int = 0,
    name: str = "general",
    overwrites: list[PermissionOverwrite] | None = None,
    **extra: Any,
) -> Channel:
    return Channel(
        id=channel_id,
        guild_id=guild_id,
        type=type,
        name=name,
        permission_overwrites=overwrites or [],
        **extra,
    )


def make_member(user: User, roles: list[int] | None = None, **extra: Any) -> Member:
    return Member(user=user, roles=roles or [], **extra)


def make_message(
    message_id: int,
    *,
    author: User | None = None,
    channel_id: int = CHANNEL_ID,
    content: str = "hello",
    minute: int = 0,
    **extra: Any,
) -> Message:
    return Message(
        id=message_id,
        channel_id=channel_id,
        content=content,
        author=author or make_user(),
        timestamp=datetime(2024, 1, 1, 12, minute, tzinfo=timezone.utc),
        **extra,
    )


def make_client(**overrides: Any) -> AsyncMock:
    """An AsyncMock ChatClient wired to a default guild, text channel and bot member.

    Keyword arguments replace the ``return_value`` of the named method.
    """
    client = AsyncMock(spec=ChatClient)
    bot = make_user(BOT_ID, "mcp-bot", bot=True)
    guild = make_guild()
    client.get_current_user.return_value = bot
    client.list_guilds.return_value = [guild]
    client.get_guild.return_value = guild
    client.list_guild_channels.return_value = [make_channel()]
    client.list_guild_roles.return_value = guild.roles
    client.list_guild_members.return_value = [make_member(bot)]
    client.get_member.return_value = make_member(bot)
    client.get_channel.return_value = make_channel()
    client.get_user.return_value = make_user()
    client.get_messages.return_value = []
    for name, value in overrides.items():
        getattr(client, name).return_value = value
    return client


def make_context(client: Any = None) -> ToolContext:
    return ToolContext(client=client if client is not None else make_client())


class FakeTransport:
    """In-memory LineTransport fed from a list of lines; EOF once exhausted."""

    def __init__(self, lines: list[str] | None = None) -> None:
        self._lines = list(lines or [])
        self.written: list[str] = []
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        self.connected = True

    async def read_line(self) -> str | None:
        if not self._lines:
            return None
        return self._lines.pop(0)

    async def write_line(self, line: str) -> None:
        self.written.append(line)

    async def close(self) -> None:
        self.closed = True

    def responses(self) -> list[dict[str, Any]]:
        return [json.loads(line) for line in self.written]


def request_line(method: str, params: Any = None, request_id: int | str | None = None) -> str:
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if request_id is not None:
        message["id"] = request_id
    if params is not None:
        message["params"] = params
    return json.dumps(message)
