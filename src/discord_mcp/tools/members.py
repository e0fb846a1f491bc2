"""Member tools: who can see a channel."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from discord_mcp.chat.permissions import (
    can_manage_channel,
    can_mention_everyone,
    can_read_history,
    can_send,
    can_view,
    channel_permissions,
)
from discord_mcp.tools.arguments import optional_bool, optional_int, require_snowflake
from discord_mcp.tools.base import BaseTool, ToolContext
from discord_mcp.tools.errors import ExecutionError
from discord_mcp.tools.lookup import bot_permissions, fetch_channel, utc_stamp
from discord_mcp.tools.models import ToolOutcome, ToolSuccess

if TYPE_CHECKING:
    from discord_mcp.chat.models import Guild, Member
    from discord_mcp.chat.permissions import Permission

CHANNEL_NOT_FOUND = "Channel not found or bot doesn't have access"

# Upper bound on members fetched to evaluate channel access.
MEMBER_SCAN_LIMIT = 10_000

_OFFLINE = frozenset({"offline", "invisible"})


class GetChannelMembers(BaseTool):
    name = "get_channel_members"
    description = "Get a list of members who have access to a Discord channel"
    input_schema = {
        "type": "object",
        "properties": {
            "channelId": {"type": "string", "description": "The ID of the Discord channel"},
            "limit": {
                "type": "integer",
                "description": "Maximum number of members to return (default: 100, max: 1000)",
                "minimum": 1,
                "maximum": 1000,
            },
            "includeOffline": {
                "type": "boolean",
                "description": "Whether to include offline members (default: true)",
            },
        },
        "required": ["channelId"],
    }

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        channel_id = require_snowflake(arguments, "channelId")
        limit = optional_int(arguments, "limit", default=100, minimum=1, maximum=1000)
        include_offline = optional_bool(arguments, "includeOffline", default=True)

        client = context.client
        channel = await fetch_channel(client, channel_id, missing=CHANNEL_NOT_FOUND)
        if channel.guild_id is None:
            raise ExecutionError("Channel is not a guild channel")
        guild = await client.get_guild(channel.guild_id)
        if guild is None:
            raise ExecutionError(CHANNEL_NOT_FOUND)
        if not can_view(await bot_permissions(client, guild, channel)):
            raise ExecutionError("Bot doesn't have permission to view this channel")

        members = await client.list_guild_members(guild.id, limit=MEMBER_SCAN_LIMIT)
        with_access = []
        for member in members:
            perms = channel_permissions(member, guild, channel)
            if not can_view(perms):
                continue
            # Presence is unknown over REST; unknown status is never filtered out.
            if not include_offline and member.status in _OFFLINE:
                continue
            with_access.append((member, perms))

        listed = [_member_details(member, perms, guild) for member, perms in with_access[:limit]]
        return ToolSuccess(
            data={
                "channelId": str(channel.id),
                "channelName": channel.name,
                "guildId": str(guild.id),
                "guildName": guild.name,
                "memberCount": len(listed),
                "totalMembersWithAccess": len(with_access),
                "includeOffline": include_offline,
                "members": listed,
            }
        )


def _member_details(member: Member, perms: Permission, guild: Guild) -> dict[str, Any]:
    user = member.user
    roles = []
    for role_id in member.roles:
        if role_id == guild.id:
            continue
        role = guild.get_role(role_id)
        roles.append(
            {
                "id": str(role_id),
                "name": role.name if role else "Unknown",
                "color": role.hex_color if role else "#000000",
                "position": role.position if role else 0,
            }
        )
    return {
        "id": str(user.id),
        "username": user.username,
        "displayName": member.display_name,
        "globalName": user.global_name,
        "discriminator": user.discriminator,
        "nickname": member.nick,
        "isBot": user.bot,
        "status": member.status,
        "joinedAt": utc_stamp(member.joined_at),
        "roles": roles,
        "permissions": {
            "manageChannel": can_manage_channel(perms),
            "sendMessages": can_send(perms),
            "readMessageHistory": can_read_history(perms),
            "mentionEveryone": can_mention_everyone(perms),
        },
    }
