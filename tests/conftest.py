import asyncio

import pytest

from discord_guild_agent.application.interfaces.media_resolver import (
    MediaResolver,
    ResolvedStream,
    SearchResult,
    StreamOptions,
)
from discord_guild_agent.application.interfaces.voice_transport import (
    StreamEndCallback,
    VoiceConnection,
    VoiceTransport,
)
from discord_guild_agent.domain.music.value_objects import QueryKind
from discord_guild_agent.domain.shared.exceptions import (
    ResolutionFailedError,
    StreamUnavailableError,
)

GUILD_ID = 111111111
OTHER_GUILD_ID = 555555555
CHANNEL_ID = 333333333


# ============================================================================
# In-memory fakes
# ============================================================================


class FakeVoiceConnection(VoiceConnection):
    """Voice connection that records streams and ends them on demand."""

    def __init__(self, guild_id: int, channel_id: int) -> None:
        self._guild_id = guild_id
        self._channel_id = channel_id
        self.connected = True
        self.destroyed = False
        self.fail_play = False
        self.play_error: Exception | None = None
        self.played: list[ResolvedStream] = []
        self._after: StreamEndCallback | None = None

    @property
    def guild_id(self) -> int:
        return self._guild_id

    @property
    def channel_id(self) -> int | None:
        return self._channel_id

    def play(self, stream: ResolvedStream, after: StreamEndCallback) -> None:
        if self.fail_play:
            raise StreamUnavailableError(stream.url, "player refused the stream")
        if self.play_error is not None:
            raise self.play_error
        self.played.append(stream)
        self._after = after

    def finish(self, error: Exception | None = None) -> None:
        """Simulate the player reaching the end of the current stream."""
        after, self._after = self._after, None
        if after is not None:
            after(error)

    def stop(self) -> None:
        self.finish()

    def is_playing(self) -> bool:
        return self._after is not None

    def is_connected(self) -> bool:
        return self.connected

    async def destroy(self) -> None:
        self.destroyed = True
        self.connected = False


class FakeVoiceTransport(VoiceTransport):
    def __init__(self) -> None:
        self.connections: list[FakeVoiceConnection] = []
        self.join_error: Exception | None = None

    async def join(self, guild_id: int, channel_id: int) -> FakeVoiceConnection:
        if self.join_error is not None:
            raise self.join_error
        connection = FakeVoiceConnection(guild_id, channel_id)
        self.connections.append(connection)
        return connection

    def lookup(self, guild_id: int) -> FakeVoiceConnection | None:
        for connection in reversed(self.connections):
            if connection.guild_id == guild_id and connection.is_connected():
                return connection
        return None

    @property
    def latest(self) -> FakeVoiceConnection:
        return self.connections[-1]


class FakeMediaResolver(MediaResolver):
    """Resolver backed by dictionaries, with per-locator failure injection."""

    def __init__(self) -> None:
        self.catalog: dict[str, SearchResult] = {}
        self.stream_titles: dict[str, str] = {}
        self.failing: set[str] = set()
        self.unavailable: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.search_error: Exception | None = None
        self.opened: list[str] = []

    def classify(self, query: str) -> QueryKind:
        return QueryKind.DIRECT if "://" in query else QueryKind.SEARCH_TERM

    async def search(self, term: str, limit: int = 1) -> list[SearchResult]:
        if self.search_error is not None:
            raise self.search_error
        result = self.catalog.get(term)
        return [result] if result else []

    async def open_stream(self, locator: str, options: StreamOptions) -> ResolvedStream:
        self.opened.append(locator)
        gate = self.gates.get(locator)
        if gate is not None:
            await gate.wait()
        if locator in self.failing:
            raise ResolutionFailedError(locator, f"extraction failed for {locator}")
        if locator in self.unavailable:
            raise StreamUnavailableError(locator)
        return ResolvedStream(
            url=f"https://cdn.test/{locator.rsplit('/', 1)[-1]}",
            title=self.stream_titles.get(locator),
        )


class EventRecorder:
    """Collects published domain events of the given types."""

    def __init__(self, *event_types) -> None:
        from discord_guild_agent.domain.shared.events import get_event_bus

        self.events: list = []
        bus = get_event_bus()
        for event_type in event_types:
            bus.subscribe(event_type, self._record)

    async def _record(self, event) -> None:
        self.events.append(event)

    def of_type(self, event_type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Give every test a fresh global event bus."""
    from discord_guild_agent.domain.shared.events import reset_event_bus

    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def queue_manager():
    from discord_guild_agent.application.services.queue_service import QueueManager

    return QueueManager()


@pytest.fixture
def media_resolver():
    return FakeMediaResolver()


@pytest.fixture
def voice_transport():
    return FakeVoiceTransport()


@pytest.fixture
def orchestrator(queue_manager, media_resolver, voice_transport):
    """Create a playback orchestrator wired to in-memory fakes."""
    from discord_guild_agent.application.services.playback_service import PlaybackOrchestrator

    return PlaybackOrchestrator(
        queue_manager=queue_manager,
        media_resolver=media_resolver,
        voice_transport=voice_transport,
    )


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    from discord_guild_agent.domain.music.entities import Track

    return Track(
        source_ref="https://media.test/song-a",
        title="Song A",
        duration_seconds=185,
    )


def make_track(name: str, title: str | None = None):
    from discord_guild_agent.domain.music.entities import Track

    return Track(source_ref=f"https://media.test/{name}", title=title)


async def join_pending(orchestrator) -> None:
    """Wait until every stream-end reaction the orchestrator scheduled has finished."""
    while True:
        await asyncio.sleep(0)
        pending = [t for t in orchestrator._tasks if not t.done()]
        if not pending:
            return
        await asyncio.gather(*pending, return_exceptions=True)
