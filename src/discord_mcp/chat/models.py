"""Discord resource models parsed from REST API payloads.

Discord sends snowflake ids as strings; pydantic coerces them to ``int``.
Unknown fields are ignored so API additions never break parsing.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import IntEnum

from pydantic import BaseModel, Field

DISCORD_EPOCH_MS = 1420070400000
CDN_BASE_URL = "https://cdn.discordapp.com"


def snowflake_time(snowflake: int) -> datetime:
    """Return the creation time encoded in a Discord snowflake."""
    return datetime.fromtimestamp(((snowflake >> 22) + DISCORD_EPOCH_MS) / 1000, tz=timezone.utc)


class ChannelType(IntEnum):
    GUILD_TEXT = 0
    DM = 1
    GUILD_VOICE = 2
    GROUP_DM = 3
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5
    ANNOUNCEMENT_THREAD = 10
    PUBLIC_THREAD = 11
    PRIVATE_THREAD = 12
    GUILD_STAGE_VOICE = 13
    GUILD_DIRECTORY = 14
    GUILD_FORUM = 15
    GUILD_MEDIA = 16


# ---------------------------------------------------------------------------
# Users, roles, members
# ---------------------------------------------------------------------------


class User(BaseModel):
    id: int
    username: str
    global_name: str | None = None
    discriminator: str = "0"
    avatar: str | None = None
    bot: bool = False

    @property
    def display_name(self) -> str:
        return self.global_name or self.username

    @property
    def avatar_url(self) -> str | None:
        if self.avatar is None:
            return None
        return f"{CDN_BASE_URL}/avatars/{self.id}/{self.avatar}.png"


class Role(BaseModel):
    id: int
    name: str
    color: int = 0
    position: int = 0
    permissions: int = 0

    @property
    def hex_color(self) -> str:
        return f"#{self.color:06X}"


class Member(BaseModel):
    """A guild member. ``status`` is only known when presence data is available."""

    user: User
    nick: str | None = None
    roles: list[int] = []
    joined_at: datetime | None = None
    status: str | None = None

    @property
    def display_name(self) -> str:
        return self.nick or self.user.display_name


# ---------------------------------------------------------------------------
# Guilds and channels
# ---------------------------------------------------------------------------


class PermissionOverwrite(BaseModel):
    """A channel-level permission overwrite. ``type`` 0 is a role, 1 a member."""

    id: int
    type: int
    allow: int = 0
    deny: int = 0


class Channel(BaseModel):
    id: int
    type: int
    guild_id: int | None = None
    name: str | None = None
    position: int = 0
    parent_id: int | None = None
    topic: str | None = None
    nsfw: bool = False
    user_limit: int | None = None
    bitrate: int | None = None
    permission_overwrites: list[PermissionOverwrite] = []

    @property
    def is_text(self) -> bool:
        """Whether messages can be sent and read in this guild channel."""
        return self.type in (ChannelType.GUILD_TEXT, ChannelType.GUILD_ANNOUNCEMENT)

    @property
    def is_guild_channel(self) -> bool:
        return self.guild_id is not None


class Guild(BaseModel):
    id: int
    name: str
    description: str | None = None
    owner_id: int | None = None
    icon: str | None = None
    banner: str | None = None
    preferred_locale: str | None = None
    premium_tier: int = 0
    premium_subscription_count: int | None = None
    verification_level: int = 0
    explicit_content_filter: int = 0
    approximate_member_count: int | None = None
    roles: list[Role] = []

    @property
    def created_at(self) -> datetime:
        return snowflake_time(self.id)

    @property
    def icon_url(self) -> str | None:
        if self.icon is None:
            return None
        return f"{CDN_BASE_URL}/icons/{self.id}/{self.icon}.png"

    @property
    def banner_url(self) -> str | None:
        if self.banner is None:
            return None
        return f"{CDN_BASE_URL}/banners/{self.id}/{self.banner}.png"

    def get_role(self, role_id: int) -> Role | None:
        return next((role for role in self.roles if role.id == role_id), None)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Attachment(BaseModel):
    id: int
    filename: str
    size: int = 0
    url: str
    content_type: str | None = None


class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class EmbedFooter(BaseModel):
    text: str


class EmbedAuthor(BaseModel):
    name: str


class Embed(BaseModel):
    model_config = {"populate_by_name": True}

    title: str | None = None
    description: str | None = None
    url: str | None = None
    color: int | None = None
    timestamp: datetime | None = None
    footer: EmbedFooter | None = None
    author: EmbedAuthor | None = None
    embed_fields: list[EmbedField] = Field(default_factory=list, alias="fields")


class Emoji(BaseModel):
    id: int | None = None
    name: str | None = None


class Reaction(BaseModel):
    count: int = 0
    emoji: Emoji = Field(default_factory=Emoji)


class Message(BaseModel):
    id: int
    channel_id: int
    content: str = ""
    author: User
    timestamp: datetime
    edited_timestamp: datetime | None = None
    type: int = 0
    pinned: bool = False
    mention_everyone: bool = False
    mentions: list[User] = []
    mention_roles: list[int] = []
    attachments: list[Attachment] = []
    embeds: list[Embed] = []
    reactions: list[Reaction] = []
