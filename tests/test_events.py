"""Tests for domain events and the in-process EventBus."""

import pytest
from pydantic import ValidationError

from discord_guild_agent.domain.shared.events import (
    EventBus,
    QueueExhausted,
    SessionDestroyed,
    TrackEnqueued,
    get_event_bus,
    reset_event_bus,
)

GUILD_ID = 111111111


class TestDomainEvents:
    def test_guild_id_must_be_positive(self):
        """Should reject non-snowflake guild ids."""
        with pytest.raises(ValidationError):
            QueueExhausted(guild_id=0)

    def test_events_are_frozen_and_stamped(self):
        """Should carry an id and a UTC timestamp."""
        event = TrackEnqueued(guild_id=GUILD_ID, track_title="Song", queue_position=1)

        assert event.event_id
        assert event.occurred_at.tzinfo is not None
        with pytest.raises(ValidationError):
            event.queue_position = 2


class TestEventBus:
    """Tests for subscribe/publish semantics."""

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers_of_type(self):
        """Should deliver only to handlers of the published type."""
        bus = EventBus()
        received = []

        async def on_exhausted(event):
            received.append(event)

        async def on_destroyed(event):
            raise AssertionError("wrong handler")

        bus.subscribe(QueueExhausted, on_exhausted)
        bus.subscribe(SessionDestroyed, on_destroyed)
        event = QueueExhausted(guild_id=GUILD_ID, idle_epoch=2)

        await bus.publish(event)

        assert received == [event]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self, caplog):
        """Should log handler errors and still run the other handlers."""
        bus = EventBus()
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        async def healthy(event):
            received.append(event)

        bus.subscribe(QueueExhausted, broken)
        bus.subscribe(QueueExhausted, healthy)

        await bus.publish(QueueExhausted(guild_id=GUILD_ID))

        assert len(received) == 1
        assert "Error in handler for QueueExhausted" in caplog.text

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        """Should stop delivering after unsubscribe."""
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(QueueExhausted, handler)
        bus.unsubscribe(QueueExhausted, handler)
        await bus.publish(QueueExhausted(guild_id=GUILD_ID))

        assert received == []

    def test_global_bus_is_reset(self):
        """Should hand out a new bus after reset."""
        first = get_event_bus()
        assert get_event_bus() is first

        reset_event_bus()

        assert get_event_bus() is not first
