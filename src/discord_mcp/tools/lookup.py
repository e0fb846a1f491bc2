"""Resource lookups and payload formatting shared by the built-in tools.

Lookups raise :class:`ExecutionError` with the user-facing message when a
resource is missing or hidden from the bot, so tools can stay linear.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from discord_mcp.chat.errors import RemoteApiError
from discord_mcp.chat.permissions import Permission, channel_permissions
from discord_mcp.tools.errors import ExecutionError

if TYPE_CHECKING:
    from discord_mcp.chat.client import ChatClient
    from discord_mcp.chat.models import Channel, Guild, User

SERVER_NOT_FOUND = "Server not found or bot is not a member of this server"

# Discord answers 403 (Missing Access) for channels the bot cannot see.
_HIDDEN = 403


async def fetch_channel(client: ChatClient, channel_id: int, *, missing: str) -> Channel:
    try:
        channel = await client.get_channel(channel_id)
    except RemoteApiError as exc:
        if exc.status != _HIDDEN:
            raise
        channel = None
    if channel is None:
        raise ExecutionError(missing)
    return channel


async def fetch_guild(client: ChatClient, guild_id: int) -> Guild:
    try:
        guild = await client.get_guild(guild_id)
    except RemoteApiError as exc:
        if exc.status != _HIDDEN:
            raise
        guild = None
    if guild is None:
        raise ExecutionError(SERVER_NOT_FOUND)
    return guild


async def bot_permissions(client: ChatClient, guild: Guild, channel: Channel) -> Permission:
    """Effective permissions of the bot itself in *channel*."""
    me = await client.get_current_user()
    member = await client.get_member(guild.id, me.id)
    if member is None:
        return Permission.NONE
    return channel_permissions(member, guild, channel)


async def channel_with_guild(client: ChatClient, channel_id: int, *, missing: str) -> tuple[Channel, Guild]:
    """Fetch a guild channel and its guild; DM channels count as missing."""
    channel = await fetch_channel(client, channel_id, missing=missing)
    if channel.guild_id is None:
        raise ExecutionError(missing)
    guild = await client.get_guild(channel.guild_id)
    if guild is None:
        raise ExecutionError(missing)
    return channel, guild


def iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def utc_stamp(value: datetime | None) -> str | None:
    """Second-precision UTC timestamp, e.g. ``2024-01-31T12:00:00Z``."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def user_summary(user: User) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "username": user.username,
        "displayName": user.display_name,
        "isBot": user.bot,
    }
