"""
Amethyst CLI - Entry point with IPC support

`amethyst serve` runs the player daemon; every other subcommand is sent to the
running daemon over the control socket.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from amethyst import ipc


def send_ipc_command(command: str, args: list, socket_path: Optional[str] = None) -> int:
    """
    Send a command to running Amethyst instance via IPC.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    success, message = ipc.send_command(
        command, args, Path(socket_path).expanduser() if socket_path else None
    )

    if success:
        print(message)
        return 0
    print(message, file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amethyst",
        description="Amethyst - playback control core",
    )
    parser.add_argument(
        "--socket", help="Control socket path (default: $XDG_RUNTIME_DIR/amethyst/control.sock)"
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    subparsers.add_parser("serve", help="Run the player daemon")

    play_file = subparsers.add_parser("play-file", help="Play a file now")
    play_file.add_argument("path")

    for name, help_text in (
        ("play-folder", "Replace the queue with a folder"),
        ("load-folder", "Put a folder in front of the queue"),
    ):
        folder = subparsers.add_parser(name, help=help_text)
        folder.add_argument("folder")

    for name in ("next", "previous"):
        nav = subparsers.add_parser(name, help=f"Go to the {name} track")
        nav.add_argument("skip", nargs="?", type=int)

    for name in ("seek-forward", "seek-backward"):
        seek = subparsers.add_parser(name, help=f"{name.replace('-', ' ').capitalize()} (seconds)")
        seek.add_argument("seconds", nargs="?", type=float)

    volume = subparsers.add_parser("volume", help="Show or set volume (0-1)")
    volume.add_argument("level", nargs="?", type=float)

    for name in (
        "play",
        "pause",
        "toggle",
        "clear",
        "shuffle",
        "resume-last",
        "volume-up",
        "volume-down",
        "status",
    ):
        subparsers.add_parser(name, help=f"Send '{name}' to the daemon")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the amethyst command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    if args.subcommand == "serve":
        from amethyst.app import serve

        serve()
        return

    extra = []
    for attr in ("path", "folder", "skip", "seconds", "level"):
        value = getattr(args, attr, None)
        if value is not None:
            extra.append(str(value))

    sys.exit(send_ipc_command(args.subcommand, extra, args.socket))


if __name__ == "__main__":
    main()
