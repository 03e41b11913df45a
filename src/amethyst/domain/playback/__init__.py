"""Playback domain - queue, transport and playback state machine.

This domain handles:
- Ordered queue with current index and guarded navigation
- Player reacting to queue events by loading the current track
- Transport interface and the mpv JSON IPC implementation
"""

from .player import Player, display_name, seconds_human
from .queue import QueueEvent, QueueManager, fisher_yates_shuffle, flatten
from .transport import Transport, TransportFactory

__all__ = [
    "Player",
    "display_name",
    "seconds_human",
    "QueueEvent",
    "QueueManager",
    "fisher_yates_shuffle",
    "flatten",
    "Transport",
    "TransportFactory",
]
