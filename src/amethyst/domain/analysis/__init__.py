"""Analysis domain - tempo detection and tag/artwork extraction.

These functions are the default host command handlers. They are blocking
and are run in worker threads by the host bridge.
"""

from .metadata import TrackMetadata, get_cover_art, get_metadata
from .tempo import SampleBuffer, analyze_bpm, decode_audio, detect_tempo, read_file

__all__ = [
    "TrackMetadata",
    "get_cover_art",
    "get_metadata",
    "SampleBuffer",
    "analyze_bpm",
    "decode_audio",
    "detect_tempo",
    "read_file",
]
