"""Audio output transport interface.

A transport is bound to one file for its whole life. The player builds a new
one for every load and releases the old one; it never re-targets a transport.
"""

from typing import Callable, Protocol


class Transport(Protocol):
    volume: float  # 0.0 - 1.0
    current_time: float  # seconds, settable for seeking

    @property
    def duration(self) -> float:
        """Length in seconds, 0.0 while unknown."""
        ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def release(self) -> None:
        """Stop output and free resources. The transport is unusable afterwards."""
        ...

    def on_ended(self, callback: Callable[[], None]) -> None:
        """Register the callback invoked once when playback reaches the end."""
        ...


TransportFactory = Callable[[str], Transport]
