"""Chat platform layer: the ChatClient protocol and its Discord implementation."""

from discord_mcp.chat.client import ChatClient
from discord_mcp.chat.discord import DiscordClient
from discord_mcp.chat.errors import ChatError, RemoteApiError

__all__ = [
    "ChatClient",
    "ChatError",
    "DiscordClient",
    "RemoteApiError",
]
