"""
Playback state machine for Amethyst

Reacts to queue events: whenever the currently playing path changes, the old
transport is released and a fresh one is built for the new path. Owns the
transport, the progress ticker and the active track's metadata.
"""

import asyncio
import math
from pathlib import PureWindowsPath
from typing import Any, Optional, Tuple

from loguru import logger

from amethyst import host as host_commands
from amethyst.context import PlayerContext
from amethyst.core.settings import CURRENT_PATH_KEY, QUEUE_KEY, VOLUME_KEY
from amethyst.domain.analysis.metadata import TrackMetadata
from amethyst.domain.enrichment import EnrichmentPipeline

from .queue import QueueEvent, QueueManager
from .transport import Transport, TransportFactory


def seconds_human(time: Any) -> str:
    """Turn seconds into M:SS, e.g. 80 -> "1:20". Negative or NaN -> "0:00"."""
    try:
        seconds = int(time)
    except (TypeError, ValueError, OverflowError):
        seconds = 0
    seconds = max(seconds, 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def display_name(path: str, metadata: Optional[TrackMetadata]) -> str:
    """"Artist - Title" when tagged, otherwise the bare file name."""
    if metadata and metadata.artist:
        return f"{metadata.artist} - {metadata.title or 'Unknown Title'}"
    # PureWindowsPath splits on both "/" and "\"
    return PureWindowsPath(path).name


class Player:
    """Transport owner driven by the queue.

    States: idle (no transport) and loaded (transport exists, playing or
    paused). All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        context: PlayerContext,
        transport_factory: TransportFactory,
        queue: Optional[QueueManager] = None,
        pipeline: Optional[EnrichmentPipeline] = None,
    ) -> None:
        self.context = context
        self.config = context.config
        self.queue = queue or QueueManager(
            allowed_extensions=context.config.library.allowed_extensions
        )
        self.pipeline = pipeline or EnrichmentPipeline(
            context.host, context.admission, context.caches
        )
        self._transport_factory = transport_factory

        self._transport: Optional[Transport] = None
        self._ticker: Optional[asyncio.Task] = None
        self._metadata_task: Optional[asyncio.Task] = None

        self.metadata: Optional[TrackMetadata] = None
        self.currently_playing_path: Optional[str] = None
        self.last_played_path: Optional[str] = None
        self.volume: float = context.settings.get(VOLUME_KEY, self.config.player.volume)
        self.is_playing = False

        self.queue.subscribe(self._on_queue_event)

    # Lifecycle

    def restore(self) -> None:
        """Load the persisted queue. Playback does not start until a track is selected."""
        self.last_played_path = self.context.settings.get(CURRENT_PATH_KEY, "") or None
        saved_queue = self.context.settings.get(QUEUE_KEY, [])
        if saved_queue:
            logger.info(f"Restoring queue with {len(saved_queue)} tracks")
            self.queue.set_queue(saved_queue)

    def resume_last(self) -> bool:
        """Select the track that was playing when the previous session ended."""
        if not self.last_played_path:
            return False
        tracks = self.queue.tracks
        if self.last_played_path not in tracks:
            return False
        return self.queue.set_index(tracks.index(self.last_played_path))

    async def shutdown(self) -> None:
        self._unload()
        if self._metadata_task:
            self._metadata_task.cancel()
        await self.pipeline.shutdown()

    # Reactions

    def _on_queue_event(self, event: QueueEvent) -> None:
        if event.contents_changed or event.reordered:
            self.context.settings.set(QUEUE_KEY, self.queue.tracks)

        if event.contents_changed or event.index_changed:
            self.update_currently_playing_path()

        if event.contents_changed:
            tracks = self.queue.tracks
            self.pipeline.analyze_queue_for_bpm(tracks)
            if self.config.enrichment.prefetch_covers:
                self.pipeline.analyze_queue_for_covers(tracks)

    def update_currently_playing_path(self) -> None:
        path = self.queue.current_path()
        if path == self.currently_playing_path:
            return

        self.currently_playing_path = path
        self.context.settings.set(CURRENT_PATH_KEY, path or "")

        if path:
            self.load_sound_and_play(path)
        else:
            self._unload()
            self.is_playing = False
            if self._metadata_task:
                self._metadata_task.cancel()
                self._metadata_task = None
            self.metadata = None

    def load_sound_and_play(self, path: str) -> None:
        self._unload()

        try:
            transport = self._transport_factory(path)
        except Exception as e:
            logger.error(f"Could not load {path}: {e}")
            self.is_playing = False
            return

        transport.volume = self.volume
        self._transport = transport
        self.play()
        transport.on_ended(lambda: self._handle_ended(transport))

        self._ticker = asyncio.get_running_loop().create_task(self._tick())

        self.metadata = None
        if self._metadata_task:
            self._metadata_task.cancel()
        self._metadata_task = asyncio.get_running_loop().create_task(
            self._load_metadata(path)
        )
        logger.info(f"Now playing: {path}")

    def _unload(self) -> None:
        if self._ticker:
            self._ticker.cancel()
            self._ticker = None
        if self._transport:
            self._transport.pause()
            self._transport.release()
            self._transport = None

    def _handle_ended(self, transport: Transport) -> None:
        if transport is not self._transport:
            return
        if not self.next():
            logger.debug("Reached end of queue")
            self.is_playing = False

    async def _load_metadata(self, path: str) -> None:
        try:
            metadata = await self.context.host.invoke(host_commands.GET_METADATA, [path])
        except Exception as e:
            logger.debug(f"No metadata for {path}: {e}")
            return
        # A slow read for a track we already skipped must not overwrite the new one
        if path == self.currently_playing_path:
            self.metadata = metadata

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.config.player.tick_interval)
            await self._report_presence()

    async def _report_presence(self) -> None:
        path = self.currently_playing_path
        if not path:
            return
        try:
            # Transport reads may be socket round-trips
            total, elapsed = await asyncio.to_thread(self._progress)
            await self.context.host.invoke(
                host_commands.UPDATE_PRESENCE,
                [display_name(path, self.metadata), total, elapsed, self.is_playing],
            )
        except Exception as e:
            logger.debug(f"Presence update failed: {e}")

    def _progress(self) -> Tuple[str, str]:
        return self.current_duration_formatted(), self.current_time_formatted()

    # Transport controls

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    def play(self) -> None:
        if self._transport:
            self._transport.play()
        self.is_playing = True

    def pause(self) -> None:
        if self._transport:
            self._transport.pause()
        self.is_playing = False

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def seek_forward(self, step: Optional[float] = None) -> None:
        if self._transport:
            self._transport.current_time += (
                self.config.player.seek_step if step is None else step
            )

    def seek_backward(self, step: Optional[float] = None) -> None:
        if self._transport:
            self._transport.current_time -= (
                self.config.player.seek_step if step is None else step
            )

    def set_volume(self, volume: float) -> None:
        if self._transport:
            self._transport.volume = volume
        self.volume = volume
        self.context.settings.set(VOLUME_KEY, volume)

    def volume_up(self, amount: float = 0.1) -> None:
        current = self._transport.volume if self._transport else self.volume
        self.set_volume(min(1.0, current + amount))

    def volume_down(self, amount: float = 0.1) -> None:
        current = self._transport.volume if self._transport else self.volume
        self.set_volume(max(0.0, current - amount))

    def get_current_time(self) -> float:
        return self._transport.current_time if self._transport else 0.0

    def get_duration(self) -> float:
        if self.metadata and self.metadata.duration and math.isfinite(self.metadata.duration):
            return self.metadata.duration
        return self._transport.duration if self._transport else 0.0

    def current_time_formatted(self) -> str:
        return seconds_human(self.get_current_time())

    def current_duration_formatted(self) -> str:
        return seconds_human(self.get_duration())

    # Queue operations

    def next(self, skip: int = 1) -> bool:
        return self.queue.next(skip)

    def previous(self, skip: int = 1) -> bool:
        return self.queue.previous(skip)

    def set_index(self, index: int) -> bool:
        return self.queue.set_index(index)

    def set_queue(self, files: list) -> None:
        self.queue.set_queue(files)

    def add_to_queue_and_play(self, file: str) -> bool:
        return self.queue.prepend_and_select(file)

    def play_folder(self, files: list) -> None:
        """Replace the queue with a folder's files."""
        self.queue.set_queue(files)

    def load_folder(self, files: list) -> None:
        """Put a folder's files in front of the existing queue."""
        self.queue.set_queue([files, self.queue.tracks])

    def clear_queue(self) -> None:
        self.queue.clear()

    def shuffle(self) -> None:
        self.queue.shuffle()

    async def cover_art(self) -> Optional[str]:
        if not self.currently_playing_path:
            return None
        return await self.pipeline.get_cover_art(self.currently_playing_path)

    def status(self) -> dict[str, Any]:
        """Snapshot of player state for status queries."""
        path = self.currently_playing_path
        return {
            "path": path,
            "title": display_name(path, self.metadata) if path else None,
            "index": self.queue.index,
            "queue_length": len(self.queue),
            "is_playing": self.is_playing,
            "volume": self.volume,
            "elapsed": self.current_time_formatted(),
            "duration": self.current_duration_formatted(),
            "bpm": self.pipeline.get_bpm(path) if path else None,
        }
