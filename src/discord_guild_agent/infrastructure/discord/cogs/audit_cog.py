"""Gateway listeners that feed community activity into the audit log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_guild_agent.domain.audit.occurrences import (
    MemberJoined,
    MemberLeft,
    MessageDeleted,
    MessageEdited,
    RoleCreated,
    RoleDeleted,
    RoleRef,
    RoleUpdated,
    VoiceSnapshot,
    classify_voice_change,
    diff_member_roles,
)
from discord_guild_agent.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


def _voice_snapshot(state: discord.VoiceState) -> VoiceSnapshot:
    channel = state.channel
    return VoiceSnapshot(
        channel_id=channel.id if channel else None,
        channel_name=channel.name if channel else None,
        server_mute=bool(state.mute),
        server_deaf=bool(state.deaf),
    )


def _role_refs(member: discord.Member) -> list[RoleRef]:
    return [RoleRef(id=role.id, name=role.name) for role in member.roles]


def _channel_name(channel: object) -> str | None:
    return getattr(channel, "name", None)


def _payload_author_tag(data: dict) -> str | None:
    author = data.get("author")
    if not isinstance(author, dict) or not author.get("username"):
        return None
    discriminator = author.get("discriminator")
    if discriminator in (None, "0"):
        return author["username"]
    return f"{author['username']}#{discriminator}"


class AuditCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def _log_channel_name(self) -> str:
        return self.container.settings.audit.log_channel_name

    def _is_log_channel(self, channel: object) -> bool:
        return _channel_name(channel) == self._log_channel_name

    # ─────────────────────────────────────────────────────────────────
    # Members
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        await self.container.audit_service.record(
            MemberJoined(guild_id=member.guild.id, member_tag=str(member))
        )

    @commands.Cog.listener()
    async def on_member_remove(self, member: discord.Member) -> None:
        await self.container.audit_service.record(
            MemberLeft(guild_id=member.guild.id, member_tag=str(member))
        )

    @commands.Cog.listener()
    async def on_member_update(self, before: discord.Member, after: discord.Member) -> None:
        occurrences = diff_member_roles(
            after.guild.id, str(after), _role_refs(before), _role_refs(after)
        )
        if occurrences:
            await self.container.audit_service.record_many(occurrences)

    # ─────────────────────────────────────────────────────────────────
    # Voice
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        occurrences = classify_voice_change(
            member.guild.id, str(member), _voice_snapshot(before), _voice_snapshot(after)
        )
        if occurrences:
            await self.container.audit_service.record_many(occurrences)

    # ─────────────────────────────────────────────────────────────────
    # Roles
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_guild_role_create(self, role: discord.Role) -> None:
        await self.container.audit_service.record(
            RoleCreated(guild_id=role.guild.id, role_name=role.name)
        )

    @commands.Cog.listener()
    async def on_guild_role_delete(self, role: discord.Role) -> None:
        await self.container.audit_service.record(
            RoleDeleted(guild_id=role.guild.id, role_name=role.name)
        )

    @commands.Cog.listener()
    async def on_guild_role_update(self, before: discord.Role, after: discord.Role) -> None:
        await self.container.audit_service.record(
            RoleUpdated(guild_id=after.guild.id, old_name=before.name, new_name=after.name)
        )

    # ─────────────────────────────────────────────────────────────────
    # Messages
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_raw_message_delete(self, payload: discord.RawMessageDeleteEvent) -> None:
        if payload.guild_id is None:
            return

        channel = self.bot.get_channel(payload.channel_id)
        if self._is_log_channel(channel):
            return

        cached = payload.cached_message
        await self.container.audit_service.record(
            MessageDeleted(
                guild_id=payload.guild_id,
                author_tag=str(cached.author) if cached else None,
                channel_name=_channel_name(channel),
                content=cached.content if cached else None,
            )
        )

    @commands.Cog.listener()
    async def on_raw_message_edit(self, payload: discord.RawMessageUpdateEvent) -> None:
        if payload.guild_id is None:
            return

        # Embed unfurls arrive as updates that carry no edit timestamp.
        new_content = payload.data.get("content")
        if new_content is None or payload.data.get("edited_timestamp") is None:
            return

        cached = payload.cached_message
        if cached is not None and cached.content == new_content:
            return

        channel = self.bot.get_channel(payload.channel_id)
        if self._is_log_channel(channel):
            return

        await self.container.audit_service.record(
            MessageEdited(
                guild_id=payload.guild_id,
                author_tag=str(cached.author) if cached else _payload_author_tag(payload.data),
                channel_name=_channel_name(channel),
                old_content=(cached.content or None) if cached else None,
                new_content=new_content or None,
            )
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(AuditCog(bot, container))
