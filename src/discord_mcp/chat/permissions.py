"""Permission computation: effective permissions of a member in a channel.

Pure logic, no I/O. Follows Discord's documented resolution order:

1. The guild owner and holders of ``ADMINISTRATOR`` have every permission.
2. Base permissions are the ``@everyone`` role OR-ed with the member's roles.
3. Channel overwrites apply in order: ``@everyone``, then the member's roles
   (combined), then the member itself. Denies are applied before allows at
   each step.
4. Without ``VIEW_CHANNEL`` nothing else in the channel is granted.
"""

from __future__ import annotations

from enum import IntFlag
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from discord_mcp.chat.models import Channel, Guild, Member

_ROLE_OVERWRITE = 0
_MEMBER_OVERWRITE = 1


class Permission(IntFlag):
    NONE = 0
    CREATE_INSTANT_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    ADD_REACTIONS = 1 << 6
    VIEW_AUDIT_LOG = 1 << 7
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    SEND_TTS_MESSAGES = 1 << 12
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    ATTACH_FILES = 1 << 15
    READ_MESSAGE_HISTORY = 1 << 16
    MENTION_EVERYONE = 1 << 17

    @classmethod
    def all(cls) -> Permission:
        # Every bit Discord currently defines fits below 1 << 53.
        return cls((1 << 53) - 1)


def base_permissions(member: Member, guild: Guild) -> Permission:
    """Guild-wide permissions of *member* before channel overwrites."""
    if guild.owner_id is not None and member.user.id == guild.owner_id:
        return Permission.all()

    perms = 0
    everyone = guild.get_role(guild.id)
    if everyone is not None:
        perms |= everyone.permissions
    for role_id in member.roles:
        role = guild.get_role(role_id)
        if role is not None:
            perms |= role.permissions

    if perms & Permission.ADMINISTRATOR:
        return Permission.all()
    return Permission(perms)


def channel_permissions(member: Member, guild: Guild, channel: Channel) -> Permission:
    """Effective permissions of *member* in *channel*."""
    base = base_permissions(member, guild)
    if base & Permission.ADMINISTRATOR:
        return base

    perms = int(base)
    overwrites = channel.permission_overwrites

    for ow in overwrites:
        if ow.type == _ROLE_OVERWRITE and ow.id == guild.id:
            perms &= ~ow.deny
            perms |= ow.allow

    allow = deny = 0
    for ow in overwrites:
        if ow.type == _ROLE_OVERWRITE and ow.id in member.roles:
            allow |= ow.allow
            deny |= ow.deny
    perms &= ~deny
    perms |= allow

    for ow in overwrites:
        if ow.type == _MEMBER_OVERWRITE and ow.id == member.user.id:
            perms &= ~ow.deny
            perms |= ow.allow

    if not perms & Permission.VIEW_CHANNEL:
        return Permission.NONE
    return Permission(perms & Permission.all())


def can_view(perms: Permission) -> bool:
    return bool(perms & Permission.VIEW_CHANNEL)


def can_send(perms: Permission) -> bool:
    return can_view(perms) and bool(perms & Permission.SEND_MESSAGES)


def can_read_history(perms: Permission) -> bool:
    return can_view(perms) and bool(perms & Permission.READ_MESSAGE_HISTORY)


def can_manage_channel(perms: Permission) -> bool:
    return bool(perms & Permission.MANAGE_CHANNELS)


def can_mention_everyone(perms: Permission) -> bool:
    return bool(perms & Permission.MENTION_EVERYONE)
