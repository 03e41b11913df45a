"""Shared fixtures: fake transports, a fake host and a player wired to them."""

import asyncio
from typing import Callable, List, Optional

import pytest

from amethyst.context import PlayerContext
from amethyst.core.config import Config
from amethyst.core.settings import SettingsStore
from amethyst.domain.analysis.metadata import TrackMetadata
from amethyst.domain.enrichment import EnrichmentDomain, EnrichmentPipeline
from amethyst.domain.playback import Player
from amethyst.host import GET_METADATA, UPDATE_PRESENCE, HostBridge


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeTransport:
    """In-memory transport recording what the player asked it to do."""

    def __init__(self, path: str, duration: float = 180.0) -> None:
        self.path = path
        self.volume = 1.0
        self.current_time = 0.0
        self._duration = duration
        self.playing = False
        self.released = False
        self.play_calls = 0
        self._ended: Optional[Callable[[], None]] = None

    @property
    def duration(self) -> float:
        return self._duration

    def play(self) -> None:
        self.playing = True
        self.play_calls += 1

    def pause(self) -> None:
        self.playing = False

    def release(self) -> None:
        self.playing = False
        self.released = True

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended = callback

    def finish(self) -> None:
        """Simulate the track reaching its natural end."""
        self.playing = False
        assert self._ended is not None
        self._ended()


class TransportRecorder:
    """Transport factory that keeps every transport it built."""

    def __init__(self) -> None:
        self.created: List[FakeTransport] = []

    def __call__(self, path: str) -> FakeTransport:
        transport = FakeTransport(path)
        self.created.append(transport)
        return transport

    @property
    def paths(self) -> List[str]:
        return [t.path for t in self.created]


class PresenceRecorder:
    def __init__(self) -> None:
        self.calls: list = []

    async def __call__(self, title, total, elapsed, playing) -> None:
        self.calls.append((title, total, elapsed, playing))


@pytest.fixture
def config() -> Config:
    config = Config()
    config.player.tick_interval = 0.01
    return config


@pytest.fixture
def settings(tmp_path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.db")


@pytest.fixture
def presence() -> PresenceRecorder:
    return PresenceRecorder()


@pytest.fixture
def metadata_by_path() -> dict:
    """Tags returned by the fake get-metadata handler; missing paths fail."""
    return {}


@pytest.fixture
def host(presence, metadata_by_path) -> HostBridge:
    bridge = HostBridge()

    async def get_metadata(path: str) -> TrackMetadata:
        await asyncio.sleep(0)
        if path not in metadata_by_path:
            raise FileNotFoundError(path)
        return metadata_by_path[path]

    bridge.register(GET_METADATA, get_metadata)
    bridge.register(UPDATE_PRESENCE, presence)
    return bridge


@pytest.fixture
def context(config, settings, host) -> PlayerContext:
    return PlayerContext.create(config, settings, host)


@pytest.fixture
def bpm_results() -> dict:
    """BPM returned by the fake tempo analyzer; missing paths fail."""
    return {}


@pytest.fixture
def pipeline(context, bpm_results) -> EnrichmentPipeline:
    async def fake_tempo(host, path):
        await asyncio.sleep(0)
        return bpm_results[path]

    async def fake_artwork(host, path):
        await asyncio.sleep(0)
        return f"data:image/png;base64,{path}"

    return EnrichmentPipeline(
        context.host,
        context.admission,
        context.caches,
        analyzers={
            EnrichmentDomain.TEMPO: fake_tempo,
            EnrichmentDomain.ARTWORK: fake_artwork,
        },
    )


@pytest.fixture
def transports() -> TransportRecorder:
    return TransportRecorder()


@pytest.fixture
def player(context, transports, pipeline) -> Player:
    return Player(context, transports, pipeline=pipeline)
