"""Message tools: post to a channel, DM a user, read channel history."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from discord_mcp.chat.errors import RemoteApiError
from discord_mcp.chat.permissions import can_send
from discord_mcp.tools.arguments import (
    MAX_MESSAGE_LENGTH,
    optional_int,
    require,
    require_message,
    require_snowflake,
)
from discord_mcp.tools.base import BaseTool, ToolContext
from discord_mcp.tools.errors import ExecutionError
from discord_mcp.tools.lookup import bot_permissions, channel_with_guild, fetch_channel, iso, user_summary
from discord_mcp.tools.models import ToolOutcome, ToolSuccess

if TYPE_CHECKING:
    from discord_mcp.chat.models import Embed, Message

logger = logging.getLogger(__name__)

TEXT_CHANNEL_NOT_FOUND = "Text channel not found or bot doesn't have access"

# Discord error code for "Cannot send messages to this user".
CANNOT_MESSAGE_USER = 50007

_MESSAGE_TYPE_NAMES = {
    0: "Default",
    1: "RecipientAdd",
    2: "RecipientRemove",
    3: "Call",
    4: "ChannelNameChange",
    5: "ChannelIconChange",
    6: "ChannelPinnedMessage",
    7: "GuildMemberJoin",
    8: "UserPremiumGuildSubscription",
    18: "ThreadCreated",
    19: "Reply",
    20: "ApplicationCommand",
    21: "ThreadStarterMessage",
    23: "ContextMenuCommand",
}

_MESSAGE_PROPERTY = {
    "type": "string",
    "description": "The message content to send",
    "maxLength": MAX_MESSAGE_LENGTH,
}


class SendMessage(BaseTool):
    name = "send_message"
    description = "Send a message to a Discord text channel"
    input_schema = {
        "type": "object",
        "properties": {
            "channelId": {"type": "string", "description": "The ID of the Discord text channel"},
            "message": _MESSAGE_PROPERTY,
        },
        "required": ["channelId", "message"],
    }

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        require(arguments, "channelId")
        require(arguments, "message")
        channel_id = require_snowflake(arguments, "channelId")
        content = require_message(arguments)

        client = context.client
        channel, guild = await channel_with_guild(client, channel_id, missing=TEXT_CHANNEL_NOT_FOUND)
        if not channel.is_text:
            raise ExecutionError(TEXT_CHANNEL_NOT_FOUND)
        if not can_send(await bot_permissions(client, guild, channel)):
            raise ExecutionError("Bot doesn't have permission to send messages in this channel")

        sent = await client.send_message(channel.id, content)
        logger.info("Sent message %s to channel %s", sent.id, channel.id)
        return ToolSuccess(
            data={
                "messageId": str(sent.id),
                "content": sent.content,
                "timestamp": iso(sent.timestamp),
                "channelId": str(sent.channel_id),
                "channelName": channel.name,
                "guildId": str(guild.id),
                "guildName": guild.name,
                "author": user_summary(sent.author),
            }
        )


class SendDirectMessage(BaseTool):
    name = "send_direct_message"
    description = "Send a direct message to a Discord user"
    input_schema = {
        "type": "object",
        "properties": {
            "userId": {"type": "string", "description": "The ID of the Discord user to send a DM to"},
            "message": _MESSAGE_PROPERTY,
        },
        "required": ["userId", "message"],
    }

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        require(arguments, "userId")
        require(arguments, "message")
        user_id = require_snowflake(arguments, "userId")
        content = require_message(arguments)

        client = context.client
        try:
            user = await client.get_user(user_id)
        except RemoteApiError as exc:
            raise ExecutionError("User not found or bot doesn't have access to this user") from exc
        if user is None:
            raise ExecutionError("User not found")
        if user.bot:
            raise ExecutionError("Cannot send direct messages to bots")

        try:
            dm = await client.create_dm(user.id)
            sent = await client.send_message(dm.id, content)
        except RemoteApiError as exc:
            if exc.code == CANNOT_MESSAGE_USER:
                raise ExecutionError(
                    "Cannot send message to this user. They may have DMs disabled or have blocked the bot."
                ) from exc
            raise

        logger.info("Sent direct message %s to user %s", sent.id, user.id)
        return ToolSuccess(
            data={
                "messageId": str(sent.id),
                "content": sent.content,
                "timestamp": iso(sent.timestamp),
                "channelId": str(sent.channel_id),
                "recipient": {
                    "id": str(user.id),
                    "username": user.username,
                    "displayName": user.display_name,
                    "discriminator": user.discriminator,
                    "isBot": user.bot,
                },
                "author": user_summary(sent.author),
            }
        )


class ReadChannelMessages(BaseTool):
    name = "read_text_channel_messages"
    description = "Read recent messages from a Discord text channel"
    input_schema = {
        "type": "object",
        "properties": {
            "channelId": {"type": "string", "description": "The ID of the Discord text channel"},
            "limit": {
                "type": "integer",
                "description": "Number of recent messages to retrieve (default: 10, max: 100)",
                "minimum": 1,
                "maximum": 100,
            },
        },
        "required": ["channelId"],
    }

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        channel_id = require_snowflake(arguments, "channelId")
        limit = optional_int(arguments, "limit", default=10, minimum=1, maximum=100)

        client = context.client
        channel = await fetch_channel(client, channel_id, missing=TEXT_CHANNEL_NOT_FOUND)
        if not (channel.is_text and channel.guild_id is not None):
            raise ExecutionError(TEXT_CHANNEL_NOT_FOUND)

        guild, messages = await asyncio.gather(
            client.get_guild(channel.guild_id),
            client.get_messages(channel.id, limit),
        )
        ordered = sorted(messages, key=lambda m: m.timestamp, reverse=True)

        return ToolSuccess(
            data={
                "data": {
                    "channelId": str(channel.id),
                    "channelName": channel.name,
                    "guildId": str(channel.guild_id),
                    "guildName": guild.name if guild is not None else None,
                    "requestedLimit": limit,
                    "actualCount": len(ordered),
                    "messages": [_message_details(m) for m in ordered],
                }
            }
        )


def _message_details(message: Message) -> dict[str, Any]:
    author = message.author
    return {
        "id": str(message.id),
        "content": message.content,
        "author": {
            "id": str(author.id),
            "username": author.username,
            "discriminator": author.discriminator,
            "displayName": author.display_name,
            "isBot": author.bot,
            "avatarUrl": author.avatar_url,
        },
        "timestamp": iso(message.timestamp),
        "editedTimestamp": iso(message.edited_timestamp),
        "messageType": _MESSAGE_TYPE_NAMES.get(message.type, str(message.type)),
        "isPinned": message.pinned,
        "mentionsEveryone": message.mention_everyone,
        "mentionedUsers": [str(u.id) for u in message.mentions],
        "mentionedRoles": [str(r) for r in message.mention_roles],
        "attachments": [
            {
                "id": str(a.id),
                "filename": a.filename,
                "size": a.size,
                "url": a.url,
                "contentType": a.content_type,
            }
            for a in message.attachments
        ],
        "embeds": [_embed_details(e) for e in message.embeds],
        "reactions": [{"emote": r.emoji.name, "count": r.count} for r in message.reactions],
    }


def _embed_details(embed: Embed) -> dict[str, Any]:
    return {
        "title": embed.title,
        "description": embed.description,
        "url": embed.url,
        "color": embed.color,
        "timestamp": iso(embed.timestamp),
        "footerText": embed.footer.text if embed.footer else None,
        "authorName": embed.author.name if embed.author else None,
        "fields": [{"name": f.name, "value": f.value, "inline": f.inline} for f in embed.embed_fields],
    }
