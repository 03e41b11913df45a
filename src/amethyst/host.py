"""Host process boundary: named call-and-response commands.

The player core never reads files, decodes audio or talks to presence
integrations directly. It invokes commands by name with a list of arguments
and gets a value back or an exception.
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, Optional, Sequence

from loguru import logger

from amethyst.core.config import Config
from amethyst.core.exceptions import UnknownHostCommand

Handler = Callable[..., Any]

READ_FILE = "read-file"
DECODE_AUDIO = "decode-audio"
DETECT_TEMPO = "detect-tempo"
GET_METADATA = "get-metadata"
GET_COVER = "get-cover"
UPDATE_PRESENCE = "update-presence"


def _is_async(handler: Handler) -> bool:
    # Callable objects with an async __call__ are not coroutine functions themselves
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


class HostBridge:
    """Registry of host command handlers.

    Plain functions run in a worker thread so that file IO and number
    crunching never block the event loop; coroutine functions and objects
    with an async ``__call__`` are awaited directly.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        if name in self._handlers:
            logger.debug(f"Replacing host handler for {name!r}")
        self._handlers[name] = handler

    def has(self, name: str) -> bool:
        return name in self._handlers

    async def invoke(self, name: str, args: Optional[Sequence[Any]] = None) -> Any:
        """Call the handler registered for ``name`` with ``args``.

        Raises:
            UnknownHostCommand: If no handler is registered for ``name``
            Exception: Whatever the handler raises
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownHostCommand(name)

        args = list(args or [])
        if _is_async(handler):
            return await handler(*args)
        result = await asyncio.to_thread(handler, *args)
        if inspect.isawaitable(result):
            return await result
        return result

    @classmethod
    def with_defaults(cls, config: Config) -> "HostBridge":
        """Bridge wired to the local analysis, metadata and presence handlers."""
        from amethyst import presence
        from amethyst.domain.analysis import metadata, tempo

        bridge = cls()
        bridge.register(READ_FILE, tempo.read_file)
        bridge.register(DECODE_AUDIO, tempo.decode_audio)
        bridge.register(
            DETECT_TEMPO,
            lambda buffer: tempo.detect_tempo(
                buffer,
                min_bpm=config.enrichment.min_bpm,
                max_bpm=config.enrichment.max_bpm,
            ),
        )
        bridge.register(GET_METADATA, metadata.get_metadata)
        bridge.register(GET_COVER, metadata.get_cover_art)
        bridge.register(UPDATE_PRESENCE, presence.update_presence)
        return bridge
