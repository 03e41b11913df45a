"""Tests for command routing."""

import json
from pathlib import Path

import pytest

from amethyst.router import REQUIRE_SENTINEL, handle_command


@pytest.fixture
def folder(tmp_path) -> Path:
    for name in ("02.mp3", "01.flac", "readme.txt"):
        (tmp_path / name).touch()
    return tmp_path


@pytest.mark.anyio
class TestQueueCommands:
    async def test_play_file(self, player, transports) -> None:
        success, message = await handle_command(player, "play-file", ["/music/a.mp3"])

        assert success is True
        assert "a.mp3" in message
        assert transports.paths == ["/music/a.mp3"]
        await player.shutdown()

    async def test_play_file_sentinel_is_ignored(self, player, transports) -> None:
        assert await handle_command(player, "play-file", [REQUIRE_SENTINEL]) == (True, "Ignored")
        assert len(player.queue) == 0
        assert transports.created == []

    async def test_play_file_rejects_unsupported(self, player) -> None:
        success, message = await handle_command(player, "play-file", ["b.txt"])
        assert success is False
        assert "Unsupported" in message

    async def test_play_file_requires_path(self, player) -> None:
        success, _ = await handle_command(player, "play-file", [])
        assert success is False

    async def test_play_folder_replaces_queue(self, player, folder) -> None:
        player.set_queue(["old.mp3"])

        success, message = await handle_command(player, "play-folder", [str(folder)])

        assert success is True
        assert message.startswith("Queued 2 tracks")
        assert [Path(p).name for p in player.queue.tracks] == ["01.flac", "02.mp3"]

    async def test_load_folder_prepends(self, player, folder) -> None:
        player.set_queue(["old.mp3"])

        await handle_command(player, "load-folder", [str(folder)])

        assert [Path(p).name for p in player.queue.tracks] == ["01.flac", "02.mp3", "old.mp3"]

    async def test_clear_and_shuffle(self, player) -> None:
        player.set_queue(["a.mp3", "b.mp3"])
        assert (await handle_command(player, "shuffle", []))[0] is True
        assert sorted(player.queue.tracks) == ["a.mp3", "b.mp3"]
        assert (await handle_command(player, "clear", []))[0] is True
        assert len(player.queue) == 0

    async def test_resume_last_without_history(self, player) -> None:
        assert await handle_command(player, "resume-last", []) == (False, "Nothing to resume")


@pytest.mark.anyio
class TestTransportCommands:
    async def test_navigation(self, player) -> None:
        player.set_queue([f"{i}.mp3" for i in range(6)])
        player.set_index(0)

        assert await handle_command(player, "next", ["2"]) == (True, "Track 3/6")
        assert await handle_command(player, "previous", []) == (True, "Track 2/6")
        assert await handle_command(player, "previous", []) == (False, "No previous track")
        await player.shutdown()

    async def test_next_on_empty_queue(self, player) -> None:
        assert await handle_command(player, "next", []) == (False, "No next track")

    async def test_toggle(self, player) -> None:
        player.add_to_queue_and_play("a.mp3")
        assert await handle_command(player, "toggle", []) == (True, "Paused")
        assert await handle_command(player, "toggle", []) == (True, "Playing")
        assert await handle_command(player, "pause", []) == (True, "Paused")
        assert await handle_command(player, "play", []) == (True, "Playing")
        await player.shutdown()

    async def test_seek(self, player) -> None:
        player.add_to_queue_and_play("a.mp3")
        assert await handle_command(player, "seek-forward", ["65"]) == (True, "1:05")
        assert await handle_command(player, "seek-backward", []) == (True, "1:00")
        await player.shutdown()

    async def test_volume(self, player) -> None:
        assert await handle_command(player, "volume", ["0.5"]) == (True, "Volume 50%")
        assert await handle_command(player, "volume", []) == (True, "Volume 50%")
        assert await handle_command(player, "volume-up", []) == (True, "Volume 60%")
        assert await handle_command(player, "volume-down", []) == (True, "Volume 50%")

    async def test_volume_out_of_range(self, player) -> None:
        success, _ = await handle_command(player, "volume", ["1.5"])
        assert success is False
        assert player.volume == 1.0

    async def test_invalid_argument(self, player) -> None:
        success, message = await handle_command(player, "next", ["two"])
        assert success is False
        assert message.startswith("Invalid argument for next")


@pytest.mark.anyio
class TestInfoCommands:
    async def test_status_is_json(self, player) -> None:
        success, message = await handle_command(player, "status", [])
        assert success is True
        status = json.loads(message)
        assert status["path"] is None
        assert status["queue_length"] == 0

    async def test_help(self, player) -> None:
        success, message = await handle_command(player, "help", [])
        assert success is True
        assert "play-file" in message

    async def test_unknown(self, player) -> None:
        assert await handle_command(player, "dance", []) == (False, "Unknown command: dance")
