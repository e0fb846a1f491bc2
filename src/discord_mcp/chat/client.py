"""ChatClient protocol: the chat-platform surface the tools depend on.

Lookups return ``None`` when the resource does not exist or is not visible to
the bot; every other remote failure raises
:class:`~discord_mcp.chat.errors.RemoteApiError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from discord_mcp.chat.models import Channel, Guild, Member, Message, Role, User


@runtime_checkable
class ChatClient(Protocol):
    """Async access to guilds, channels, members and messages."""

    async def get_current_user(self) -> User:
        """Return the bot's own user."""
        ...

    async def list_guilds(self) -> list[Guild]: ...

    async def get_guild(self, guild_id: int) -> Guild | None:
        """Return the guild with its roles and approximate member count."""
        ...

    async def list_guild_channels(self, guild_id: int) -> list[Channel]: ...

    async def list_guild_roles(self, guild_id: int) -> list[Role]: ...

    async def list_guild_members(self, guild_id: int, limit: int = 1000) -> list[Member]: ...

    async def get_member(self, guild_id: int, user_id: int) -> Member | None: ...

    async def get_channel(self, channel_id: int) -> Channel | None: ...

    async def get_user(self, user_id: int) -> User | None: ...

    async def create_dm(self, user_id: int) -> Channel:
        """Open (or reuse) the direct-message channel with a user."""
        ...

    async def send_message(self, channel_id: int, content: str) -> Message: ...

    async def get_messages(self, channel_id: int, limit: int) -> list[Message]:
        """Return up to *limit* recent messages, newest first."""
        ...

    async def close(self) -> None: ...
