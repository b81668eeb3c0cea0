"""Typed records of community activity that the audit pipeline reports.

Occurrences are built by the Discord listeners from gateway payloads and
carry only display data (tags and names), so they can be formatted without
touching the Discord client.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from discord_guild_agent.domain.shared.types import DiscordSnowflake


class AuditOccurrence(BaseModel):
    """Base class for all audit occurrences."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


# === Membership ===


class MemberJoined(AuditOccurrence):
    member_tag: str


class MemberLeft(AuditOccurrence):
    member_tag: str


# === Voice ===


class VoiceChannelJoined(AuditOccurrence):
    member_tag: str
    channel_name: str


class VoiceChannelLeft(AuditOccurrence):
    member_tag: str
    channel_name: str


class VoiceChannelMoved(AuditOccurrence):
    member_tag: str
    from_channel: str
    to_channel: str


class ServerMuteChanged(AuditOccurrence):
    member_tag: str
    muted: bool


class ServerDeafenChanged(AuditOccurrence):
    member_tag: str
    deafened: bool


# === Roles ===


class RoleCreated(AuditOccurrence):
    role_name: str


class RoleDeleted(AuditOccurrence):
    role_name: str


class RoleUpdated(AuditOccurrence):
    old_name: str
    new_name: str


class RolesGranted(AuditOccurrence):
    member_tag: str
    role_names: tuple[str, ...]


class RolesRevoked(AuditOccurrence):
    member_tag: str
    role_names: tuple[str, ...]


# === Messages ===


class MessageDeleted(AuditOccurrence):
    author_tag: str | None = None
    channel_name: str | None = None
    content: str | None = None


class MessageEdited(AuditOccurrence):
    author_tag: str | None = None
    channel_name: str | None = None
    old_content: str | None = None
    new_content: str | None = None


# === Snapshots used to derive occurrences ===


class VoiceSnapshot(BaseModel):
    """The parts of a member's voice state the audit log cares about."""

    model_config = ConfigDict(frozen=True)

    channel_id: int | None = None
    channel_name: str | None = None
    server_mute: bool = False
    server_deaf: bool = False


class RoleRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


def classify_voice_change(
    guild_id: int, member_tag: str, before: VoiceSnapshot, after: VoiceSnapshot
) -> list[AuditOccurrence]:
    """Map a voice-state transition to audit occurrences.

    Join, leave and move are reported alone. Only when the member stayed in
    the same channel are server mute and deafen changes reported, each one
    independently.
    """
    if before.channel_id is None and after.channel_id is not None:
        return [
            VoiceChannelJoined(
                guild_id=guild_id,
                member_tag=member_tag,
                channel_name=after.channel_name or "",
            )
        ]

    if before.channel_id is not None and after.channel_id is None:
        return [
            VoiceChannelLeft(
                guild_id=guild_id,
                member_tag=member_tag,
                channel_name=before.channel_name or "",
            )
        ]

    if before.channel_id != after.channel_id:
        return [
            VoiceChannelMoved(
                guild_id=guild_id,
                member_tag=member_tag,
                from_channel=before.channel_name or "",
                to_channel=after.channel_name or "",
            )
        ]

    occurrences: list[AuditOccurrence] = []
    if before.server_mute != after.server_mute:
        occurrences.append(
            ServerMuteChanged(guild_id=guild_id, member_tag=member_tag, muted=after.server_mute)
        )
    if before.server_deaf != after.server_deaf:
        occurrences.append(
            ServerDeafenChanged(
                guild_id=guild_id, member_tag=member_tag, deafened=after.server_deaf
            )
        )
    return occurrences


def diff_member_roles(
    guild_id: int,
    member_tag: str,
    before: Sequence[RoleRef],
    after: Sequence[RoleRef],
) -> list[AuditOccurrence]:
    """Report roles granted to and revoked from a member, in that order."""
    before_ids = {role.id for role in before}
    after_ids = {role.id for role in after}

    added = tuple(role.name for role in after if role.id not in before_ids)
    removed = tuple(role.name for role in before if role.id not in after_ids)

    occurrences: list[AuditOccurrence] = []
    if added:
        occurrences.append(RolesGranted(guild_id=guild_id, member_tag=member_tag, role_names=added))
    if removed:
        occurrences.append(
            RolesRevoked(guild_id=guild_id, member_tag=member_tag, role_names=removed)
        )
    return occurrences
