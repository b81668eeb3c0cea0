"""Audit Service - relays community occurrences to the log channel."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ...domain.audit.formatter import format_occurrence
from ...domain.shared.exceptions import SinkUnavailableError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.audit.occurrences import AuditOccurrence
    from ..interfaces.notification_sink import NotificationSink

logger = logging.getLogger(__name__)


class AuditService:
    """Best-effort audit relay: format, emit, and log-and-drop on failure."""

    def __init__(self, *, sink: NotificationSink, enabled: bool = True) -> None:
        self._sink = sink
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def record(self, occurrence: AuditOccurrence) -> bool:
        """Write one occurrence; returns False if it was dropped."""
        if not self._enabled:
            return False

        entry = format_occurrence(occurrence)
        try:
            await self._sink.emit(occurrence.guild_id, entry.title, entry.body)
        except SinkUnavailableError as e:
            logger.warning(LogTemplates.AUDIT_SINK_UNAVAILABLE, entry.title, occurrence.guild_id, e.message)
            return False

        logger.debug(LogTemplates.AUDIT_RECORDED, entry.title, occurrence.guild_id)
        return True

    async def record_many(self, occurrences: Iterable[AuditOccurrence]) -> int:
        """Write occurrences in order; returns how many were delivered."""
        delivered = 0
        for occurrence in occurrences:
            if await self.record(occurrence):
                delivered += 1
        return delivered
