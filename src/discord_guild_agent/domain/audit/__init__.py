"""
Audit Bounded Context

Community activity occurrences and their rendering as log-channel entries.
"""

from discord_guild_agent.domain.audit.formatter import AuditEntry, format_occurrence
from discord_guild_agent.domain.audit.occurrences import (
    AuditOccurrence,
    RoleRef,
    VoiceSnapshot,
    classify_voice_change,
    diff_member_roles,
)

__all__ = [
    "AuditEntry",
    "AuditOccurrence",
    "RoleRef",
    "VoiceSnapshot",
    "classify_voice_change",
    "diff_member_roles",
    "format_occurrence",
]
