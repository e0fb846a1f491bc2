"""Server (guild) tools: list servers, describe one, list its channels."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from discord_mcp.chat.models import ChannelType
from discord_mcp.tools.arguments import require_snowflake
from discord_mcp.tools.base import EMPTY_SCHEMA, BaseTool, ToolContext
from discord_mcp.tools.lookup import fetch_guild, iso
from discord_mcp.tools.models import ToolOutcome, ToolSuccess

if TYPE_CHECKING:
    from discord_mcp.chat.models import Channel

_GUILD_ID_SCHEMA = {
    "type": "object",
    "properties": {
        "guildId": {"type": "string", "description": "The ID of the Discord server/guild"},
    },
    "required": ["guildId"],
}

_PREMIUM_TIERS = ("None", "Tier1", "Tier2", "Tier3")
_VERIFICATION_LEVELS = ("None", "Low", "Medium", "High", "Extreme")
_CONTENT_FILTERS = ("Disabled", "MembersWithoutRoles", "AllMembers")

_TEXT_TYPES = (ChannelType.GUILD_TEXT, ChannelType.GUILD_ANNOUNCEMENT)


def _label(names: tuple[str, ...], value: int) -> str:
    return names[value] if 0 <= value < len(names) else str(value)


class GetServers(BaseTool):
    name = "get_discord_servers"
    description = "List all Discord servers the bot is in"
    input_schema = EMPTY_SCHEMA

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        guilds = await context.client.list_guilds()
        return ToolSuccess(data={"servers": [{"id": str(g.id), "name": g.name} for g in guilds]})


class GetServerInfo(BaseTool):
    name = "discord_get_server_info"
    description = "Get detailed information about a specific Discord server"
    input_schema = _GUILD_ID_SCHEMA

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        guild_id = require_snowflake(arguments, "guildId")
        client = context.client

        guild = await fetch_guild(client, guild_id)
        channels = await client.list_guild_channels(guild.id)

        def count(*types: ChannelType) -> int:
            return sum(1 for c in channels if c.type in types)

        return ToolSuccess(
            data={
                "serverInfo": {
                    "id": str(guild.id),
                    "name": guild.name,
                    "description": guild.description,
                    "memberCount": guild.approximate_member_count,
                    "createdAt": iso(guild.created_at),
                    "ownerId": str(guild.owner_id) if guild.owner_id is not None else None,
                    "iconUrl": guild.icon_url,
                    "bannerUrl": guild.banner_url,
                    "preferredLocale": guild.preferred_locale,
                    "premiumTier": _label(_PREMIUM_TIERS, guild.premium_tier),
                    "boostCount": guild.premium_subscription_count,
                    "verificationLevel": _label(_VERIFICATION_LEVELS, guild.verification_level),
                    "explicitContentFilter": _label(_CONTENT_FILTERS, guild.explicit_content_filter),
                    "textChannelCount": count(*_TEXT_TYPES),
                    "voiceChannelCount": count(ChannelType.GUILD_VOICE),
                    "categoryCount": count(ChannelType.GUILD_CATEGORY),
                    "roleCount": len(guild.roles),
                }
            }
        )


class GetServerChannels(BaseTool):
    name = "discord_get_server_channels"
    description = "Get all channels in a Discord server with their IDs"
    input_schema = _GUILD_ID_SCHEMA

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        guild_id = require_snowflake(arguments, "guildId")
        client = context.client

        guild = await fetch_guild(client, guild_id)
        channels = sorted(await client.list_guild_channels(guild.id), key=lambda c: (c.position, c.id))

        def of(*types: ChannelType) -> list[Channel]:
            return [c for c in channels if c.type in types]

        text = [_text_like(c, "text") for c in of(*_TEXT_TYPES)]
        voice = [_voice_like(c, "voice") for c in of(ChannelType.GUILD_VOICE)]
        categories = [
            {"id": str(c.id), "name": c.name, "type": "category", "position": c.position}
            for c in of(ChannelType.GUILD_CATEGORY)
        ]
        forums = [_text_like(c, "forum") for c in of(ChannelType.GUILD_FORUM)]
        stages = [_voice_like(c, "stage") for c in of(ChannelType.GUILD_STAGE_VOICE)]

        return ToolSuccess(
            data={
                "channels": {
                    "guildId": str(guild.id),
                    "guildName": guild.name,
                    "textChannels": text,
                    "voiceChannels": voice,
                    "categoryChannels": categories,
                    "forumChannels": forums,
                    "stageChannels": stages,
                    "totalChannels": len(text) + len(voice) + len(categories) + len(forums) + len(stages),
                }
            }
        )


def _category_id(channel: Channel) -> str | None:
    return str(channel.parent_id) if channel.parent_id is not None else None


def _text_like(channel: Channel, kind: str) -> dict[str, Any]:
    return {
        "id": str(channel.id),
        "name": channel.name,
        "type": kind,
        "categoryId": _category_id(channel),
        "position": channel.position,
        "topic": channel.topic,
        "isNsfw": channel.nsfw,
    }


def _voice_like(channel: Channel, kind: str) -> dict[str, Any]:
    return {
        "id": str(channel.id),
        "name": channel.name,
        "type": kind,
        "categoryId": _category_id(channel),
        "position": channel.position,
        "userLimit": channel.user_limit,
        "bitrate": channel.bitrate,
    }
