"""
Command routing for Amethyst.

Routes inbound host commands (IPC or CLI) to player operations.
"""

import asyncio
import json
from pathlib import Path
from typing import List, Tuple

from loguru import logger

from amethyst.domain.library import list_audio_files
from amethyst.domain.playback import Player

# Hosts pass this flag through as a file argument when launched without one
REQUIRE_SENTINEL = "--require"

HELP_TEXT = """
Amethyst - playback control

Queue commands:
  play-file <path>      Put a file at the front of the queue and play it
  play-folder <dir>     Replace the queue with a folder's audio files
  load-folder <dir>     Put a folder's audio files in front of the queue
  clear                 Empty the queue
  shuffle               Shuffle the queue
  resume-last           Play the track that was playing at last exit

Transport commands:
  play | pause | toggle
  next [n] | previous [n]
  seek-forward [s] | seek-backward [s]
  volume <0-1> | volume-up | volume-down

Info:
  status                Show the current track and player state
  help                  Show this help message
""".strip()


def _float_arg(args: List[str], default=None):
    if not args:
        return default
    return float(args[0])


def _int_arg(args: List[str], default: int = 1) -> int:
    if not args:
        return default
    return int(args[0])


async def _folder_files(player: Player, folder: str) -> List[str]:
    return await asyncio.to_thread(
        list_audio_files, Path(folder), player.config.library
    )


async def handle_command(player: Player, command: str, args: List[str]) -> Tuple[bool, str]:
    """
    Handle a single command.

    Args:
        player: Player instance
        command: Command name
        args: Command arguments

    Returns:
        (success, message) tuple
    """
    logger.debug(f"Command: {command} {args}")

    try:
        if command == "play-file":
            if not args:
                return False, "play-file requires a path"
            if args[0] == REQUIRE_SENTINEL:
                return True, "Ignored"
            if player.add_to_queue_and_play(args[0]):
                return True, f"Playing {args[0]}"
            return False, f"Unsupported file type: {args[0]}"

        elif command in ("play-folder", "load-folder"):
            if not args:
                return False, f"{command} requires a folder"
            files = await _folder_files(player, args[0])
            if command == "play-folder":
                player.play_folder(files)
            else:
                player.load_folder(files)
            return True, f"Queued {len(files)} tracks from {args[0]}"

        elif command == "clear":
            player.clear_queue()
            return True, "Queue cleared"

        elif command == "shuffle":
            player.shuffle()
            return True, "Queue shuffled"

        elif command == "resume-last":
            if player.resume_last():
                return True, f"Resuming {player.currently_playing_path}"
            return False, "Nothing to resume"

        elif command == "play":
            player.play()
            return True, "Playing"

        elif command == "pause":
            player.pause()
            return True, "Paused"

        elif command == "toggle":
            player.toggle()
            return True, "Playing" if player.is_playing else "Paused"

        elif command == "next":
            if player.next(_int_arg(args)):
                return True, f"Track {player.queue.index + 1}/{len(player.queue)}"
            return False, "No next track"

        elif command == "previous":
            if player.previous(_int_arg(args)):
                return True, f"Track {player.queue.index + 1}/{len(player.queue)}"
            return False, "No previous track"

        elif command == "seek-forward":
            player.seek_forward(_float_arg(args))
            return True, player.current_time_formatted()

        elif command == "seek-backward":
            player.seek_backward(_float_arg(args))
            return True, player.current_time_formatted()

        elif command == "volume":
            if not args:
                return True, f"Volume {player.volume:.0%}"
            volume = float(args[0])
            if not 0.0 <= volume <= 1.0:
                return False, "Volume must be between 0 and 1"
            player.set_volume(volume)
            return True, f"Volume {volume:.0%}"

        elif command == "volume-up":
            player.volume_up()
            return True, f"Volume {player.volume:.0%}"

        elif command == "volume-down":
            player.volume_down()
            return True, f"Volume {player.volume:.0%}"

        elif command == "status":
            return True, json.dumps(player.status())

        elif command == "help":
            return True, HELP_TEXT

        return False, f"Unknown command: {command}"

    except ValueError as e:
        return False, f"Invalid argument for {command}: {e}"
