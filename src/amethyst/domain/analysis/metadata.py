"""
Track metadata and embedded artwork extraction.

Reads tags from audio files using Mutagen. Tag names cover ID3 (MP3/AIFF),
MP4 (M4A/AAC) and Vorbis comments (FLAC/OGG/Opus).
"""

import base64
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen.flac import Picture

from amethyst.core.exceptions import MetadataError


@dataclass(frozen=True)
class TrackMetadata:
    """Tags of the active track. Every field is optional."""

    artist: Optional[str] = None
    title: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[float] = None  # in seconds


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                if isinstance(value, list) and value:
                    return str(value[0])
                return str(value)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
    return None


def _open(path: str) -> Any:
    try:
        audio_file = MutagenFile(path)
    except Exception as e:
        raise MetadataError(f"Could not read {path}: {e}") from e
    if audio_file is None:
        raise MetadataError(f"Unsupported or unreadable file: {path}")
    return audio_file


def get_metadata(path: str) -> TrackMetadata:
    """Extract artist, title, album and duration from an audio file.

    Raises:
        MetadataError: If mutagen cannot read the file
    """
    audio_file = _open(path)

    duration = None
    if getattr(audio_file, "info", None) is not None:
        duration = getattr(audio_file.info, "length", None)

    return TrackMetadata(
        artist=get_tag_value(audio_file, ["TPE1", "\xa9ART", "ARTIST", "artist"]),
        title=get_tag_value(audio_file, ["TIT2", "\xa9nam", "TITLE", "title"]),
        album=get_tag_value(audio_file, ["TALB", "\xa9alb", "ALBUM", "album"]),
        duration=duration,
    )


def _mp4_mime(cover: Any) -> str:
    # MP4Cover.FORMAT_PNG == 14, FORMAT_JPEG == 13
    return "image/png" if getattr(cover, "imageformat", None) == 14 else "image/jpeg"


def _find_picture(audio_file: Any) -> Optional[tuple[bytes, str]]:
    """Return (data, mime) of the first embedded picture, if any."""
    tags = getattr(audio_file, "tags", None)

    # FLAC picture blocks
    pictures = getattr(audio_file, "pictures", None)
    if pictures:
        return pictures[0].data, pictures[0].mime or "image/jpeg"

    if tags is None:
        return None

    # ID3 (MP3, AIFF)
    if hasattr(tags, "getall"):
        frames = tags.getall("APIC")
        if frames:
            return frames[0].data, frames[0].mime or "image/jpeg"

    # MP4 (M4A, AAC)
    covers = get_raw_tag(tags, "covr")
    if covers:
        return bytes(covers[0]), _mp4_mime(covers[0])

    # Vorbis comments (OGG, Opus)
    blocks = get_raw_tag(tags, "metadata_block_picture")
    if blocks:
        try:
            picture = Picture(base64.b64decode(blocks[0]))
        except Exception as e:
            logger.debug(f"Skipping malformed metadata_block_picture: {e}")
            return None
        return picture.data, picture.mime or "image/jpeg"

    return None


def get_raw_tag(tags: Any, name: str) -> Optional[list]:
    try:
        return tags.get(name)
    except (KeyError, ValueError):
        return None


def get_cover_art(path: str) -> str:
    """Return the embedded cover of ``path`` as a ``data:`` URI.

    Raises:
        MetadataError: If the file is unreadable or has no embedded picture
    """
    picture = _find_picture(_open(path))
    if picture is None:
        raise MetadataError(f"No embedded artwork: {path}")

    data, mime = picture
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
