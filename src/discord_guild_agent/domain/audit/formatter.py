"""Render audit occurrences as (title, body) log entries."""

from __future__ import annotations

from dataclasses import dataclass

from discord_guild_agent.domain.audit.occurrences import (
    AuditOccurrence,
    MemberJoined,
    MemberLeft,
    MessageDeleted,
    MessageEdited,
    RoleCreated,
    RoleDeleted,
    RolesGranted,
    RolesRevoked,
    RoleUpdated,
    ServerDeafenChanged,
    ServerMuteChanged,
    VoiceChannelJoined,
    VoiceChannelLeft,
    VoiceChannelMoved,
)
from discord_guild_agent.domain.shared.messages import AuditMessages


@dataclass(frozen=True, slots=True)
class AuditEntry:
    title: str
    body: str


def _or_unknown(value: str | None) -> str:
    return value or AuditMessages.PLACEHOLDER_UNKNOWN


def format_occurrence(occurrence: AuditOccurrence) -> AuditEntry:
    """Map an occurrence to the entry written to the log channel.

    Raises:
        TypeError: If the occurrence type has no rendering.
    """
    match occurrence:
        case MemberJoined(member_tag=tag):
            return AuditEntry(
                AuditMessages.TITLE_MEMBER_JOINED,
                AuditMessages.BODY_MEMBER_JOINED.format(member=tag),
            )
        case MemberLeft(member_tag=tag):
            return AuditEntry(
                AuditMessages.TITLE_MEMBER_LEFT,
                AuditMessages.BODY_MEMBER_LEFT.format(member=tag),
            )
        case VoiceChannelJoined(member_tag=tag, channel_name=channel):
            return AuditEntry(
                AuditMessages.TITLE_VOICE_JOINED,
                AuditMessages.BODY_VOICE_JOINED.format(member=tag, channel=channel),
            )
        case VoiceChannelLeft(member_tag=tag, channel_name=channel):
            return AuditEntry(
                AuditMessages.TITLE_VOICE_LEFT,
                AuditMessages.BODY_VOICE_LEFT.format(member=tag, channel=channel),
            )
        case VoiceChannelMoved(member_tag=tag, from_channel=source, to_channel=target):
            return AuditEntry(
                AuditMessages.TITLE_VOICE_MOVED,
                AuditMessages.BODY_VOICE_MOVED.format(member=tag, source=source, target=target),
            )
        case ServerMuteChanged(member_tag=tag, muted=muted):
            return AuditEntry(
                AuditMessages.TITLE_SERVER_MUTE,
                AuditMessages.BODY_SERVER_MUTE.format(member=tag, value=str(muted).lower()),
            )
        case ServerDeafenChanged(member_tag=tag, deafened=deafened):
            return AuditEntry(
                AuditMessages.TITLE_SERVER_DEAFEN,
                AuditMessages.BODY_SERVER_DEAFEN.format(member=tag, value=str(deafened).lower()),
            )
        case RoleCreated(role_name=name):
            return AuditEntry(
                AuditMessages.TITLE_ROLE_CREATED,
                AuditMessages.BODY_ROLE_CREATED.format(role=name),
            )
        case RoleDeleted(role_name=name):
            return AuditEntry(
                AuditMessages.TITLE_ROLE_DELETED,
                AuditMessages.BODY_ROLE_DELETED.format(role=name),
            )
        case RoleUpdated(old_name=old, new_name=new):
            return AuditEntry(
                AuditMessages.TITLE_ROLE_UPDATED,
                AuditMessages.BODY_ROLE_UPDATED.format(old=old, new=new),
            )
        case RolesGranted(member_tag=tag, role_names=names):
            return AuditEntry(
                AuditMessages.TITLE_ROLES_GRANTED,
                AuditMessages.BODY_ROLES_GRANTED.format(member=tag, roles=", ".join(names)),
            )
        case RolesRevoked(member_tag=tag, role_names=names):
            return AuditEntry(
                AuditMessages.TITLE_ROLES_REVOKED,
                AuditMessages.BODY_ROLES_REVOKED.format(member=tag, roles=", ".join(names)),
            )
        case MessageDeleted():
            return AuditEntry(
                AuditMessages.TITLE_MESSAGE_DELETED,
                AuditMessages.BODY_MESSAGE_DELETED.format(
                    author=_or_unknown(occurrence.author_tag),
                    channel=_or_unknown(occurrence.channel_name),
                    content=occurrence.content or AuditMessages.PLACEHOLDER_NO_CONTENT,
                ),
            )
        case MessageEdited():
            return AuditEntry(
                AuditMessages.TITLE_MESSAGE_EDITED,
                AuditMessages.BODY_MESSAGE_EDITED.format(
                    author=_or_unknown(occurrence.author_tag),
                    channel=_or_unknown(occurrence.channel_name),
                    old=occurrence.old_content or AuditMessages.PLACEHOLDER_NO_OLD_CONTENT,
                    new=occurrence.new_content or AuditMessages.PLACEHOLDER_NO_NEW_CONTENT,
                ),
            )

    raise TypeError(f"No audit rendering for {type(occurrence).__name__}")
