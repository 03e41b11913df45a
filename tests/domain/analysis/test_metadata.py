"""Tests for tag and artwork extraction."""

import base64
from unittest.mock import patch

import pytest
from mutagen.flac import Picture
from mutagen.mp4 import MP4Cover

from amethyst.core.exceptions import MetadataError
from amethyst.domain.analysis.metadata import (
    TrackMetadata,
    get_cover_art,
    get_metadata,
    get_tag_value,
)

PNG = b"\x89PNG\r\n\x1a\nfake"
JPEG = b"\xff\xd8\xff\xe0fake"


class StubInfo:
    length = 215.5


class StubFrame:
    def __init__(self, data, mime):
        self.data = data
        self.mime = mime


class StubTags(dict):
    """Tag mapping with an optional ID3-style ``getall``."""

    def __init__(self, values=None, apic=None):
        super().__init__(values or {})
        if apic is not None:
            self.getall = lambda key: list(apic) if key == "APIC" else []


class StubFile:
    def __init__(self, tags=None, pictures=None):
        self.tags = tags if tags is not None else StubTags()
        self.info = StubInfo()
        if pictures is not None:
            self.pictures = pictures

    def get(self, key):
        return self.tags.get(key)


def patched(audio_file):
    return patch("amethyst.domain.analysis.metadata.MutagenFile", return_value=audio_file)


class TestGetMetadata:
    def test_id3_tags(self) -> None:
        tags = StubTags({"TPE1": ["Artist"], "TIT2": ["Song"], "TALB": ["Album"]})
        with patched(StubFile(tags)):
            meta = get_metadata("song.mp3")

        assert meta == TrackMetadata(artist="Artist", title="Song", album="Album", duration=215.5)

    def test_vorbis_tags(self) -> None:
        tags = StubTags({"artist": ["Lower"], "title": ["Case"]})
        with patched(StubFile(tags)):
            meta = get_metadata("song.ogg")

        assert meta.artist == "Lower"
        assert meta.title == "Case"
        assert meta.album is None

    def test_mp4_tags(self) -> None:
        tags = StubTags({"\xa9ART": ["Mp4 Artist"], "\xa9nam": ["Mp4 Title"]})
        with patched(StubFile(tags)):
            meta = get_metadata("song.m4a")

        assert (meta.artist, meta.title) == ("Mp4 Artist", "Mp4 Title")

    def test_unreadable_file(self) -> None:
        with patched(None):
            with pytest.raises(MetadataError):
                get_metadata("notes.txt")

    def test_mutagen_error_is_wrapped(self) -> None:
        with patch(
            "amethyst.domain.analysis.metadata.MutagenFile", side_effect=OSError("denied")
        ):
            with pytest.raises(MetadataError, match="denied"):
                get_metadata("locked.mp3")

    def test_get_tag_value_skips_value_errors(self) -> None:
        class Strict:
            def get(self, key):
                if key == "TPE1":
                    raise ValueError(key)
                return {"ARTIST": "Fallback"}.get(key)

        assert get_tag_value(Strict(), ["TPE1", "ARTIST"]) == "Fallback"


class TestGetCoverArt:
    def test_flac_picture(self) -> None:
        picture = Picture()
        picture.data = PNG
        picture.mime = "image/png"
        with patched(StubFile(pictures=[picture])):
            uri = get_cover_art("song.flac")

        assert uri == "data:image/png;base64," + base64.b64encode(PNG).decode()

    def test_id3_apic(self) -> None:
        tags = StubTags(apic=[StubFrame(JPEG, "image/jpeg")])
        with patched(StubFile(tags)):
            uri = get_cover_art("song.mp3")

        assert uri.startswith("data:image/jpeg;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == JPEG

    def test_mp4_cover(self) -> None:
        tags = StubTags({"covr": [MP4Cover(PNG, imageformat=MP4Cover.FORMAT_PNG)]})
        with patched(StubFile(tags)):
            uri = get_cover_art("song.m4a")

        assert uri.startswith("data:image/png;base64,")

    def test_vorbis_picture_block(self) -> None:
        picture = Picture()
        picture.data = JPEG
        picture.mime = "image/jpeg"
        block = base64.b64encode(picture.write()).decode("ascii")
        tags = StubTags({"metadata_block_picture": [block]})
        with patched(StubFile(tags)):
            uri = get_cover_art("song.opus")

        assert base64.b64decode(uri.split(",", 1)[1]) == JPEG

    def test_no_artwork(self) -> None:
        with patched(StubFile(StubTags({"TIT2": ["Song"]}))):
            with pytest.raises(MetadataError, match="No embedded artwork"):
                get_cover_art("song.mp3")

    def test_unreadable_file(self) -> None:
        with patched(None):
            with pytest.raises(MetadataError):
                get_cover_art("broken.mp3")
