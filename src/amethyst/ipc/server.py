"""IPC server for receiving commands from external processes."""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

from loguru import logger

from amethyst import router
from amethyst.domain.playback import Player


def get_socket_path(override: Optional[str] = None) -> Path:
    """
    Get the path to the Amethyst control socket.

    Args:
        override: Explicit socket path from config, if any

    Returns:
        Path to Unix socket
    """
    if override:
        return Path(override).expanduser()

    # Use XDG_RUNTIME_DIR if available, otherwise fall back to ~/.local/share
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        return Path(runtime_dir) / "amethyst" / "control.sock"
    return Path.home() / ".local" / "share" / "amethyst" / "control.sock"


class IPCServer:
    """Unix socket server for IPC commands.

    Each connection carries one newline-terminated JSON request
    ``{"command": ..., "args": [...]}`` and gets one JSON response
    ``{"success": ..., "message": ...}``. Commands run on the event loop,
    so they are serialized with everything else the player does.
    """

    def __init__(self, player: Player, socket_path: Optional[Path] = None) -> None:
        self.player = player
        self.socket_path = socket_path or get_socket_path()
        self._server: Optional[asyncio.AbstractServer] = None

    async def start(self) -> None:
        """Start listening on the control socket."""
        if self._server is not None:
            return

        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        # Remove stale socket if it exists
        if self.socket_path.exists():
            try:
                self.socket_path.unlink()
            except OSError:
                pass

        self._server = await asyncio.start_unix_server(
            self._handle_client, path=str(self.socket_path)
        )
        logger.info(f"IPC server listening on {self.socket_path}")

    async def stop(self) -> None:
        """Stop the server and remove the socket file."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

        if self.socket_path.exists():
            try:
                self.socket_path.unlink()
            except OSError:
                pass

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            data = await reader.readline()
            if not data:
                return
            response = await self.process(data)
            writer.write((json.dumps(response) + "\n").encode("utf-8"))
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError) as e:
            logger.debug(f"IPC client went away: {e}")
        finally:
            writer.close()

    async def process(self, data: bytes) -> dict:
        """Decode one request and run it through the router."""
        try:
            payload = json.loads(data.decode("utf-8").strip())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return {"success": False, "message": f"Invalid JSON: {e}"}

        if not isinstance(payload, dict):
            return {"success": False, "message": "Request must be a JSON object"}

        command = payload.get("command", "")
        args = payload.get("args", [])
        if not isinstance(args, list):
            return {"success": False, "message": "args must be a list"}
        args = [str(a) for a in args]

        try:
            success, message = await router.handle_command(self.player, command, args)
        except Exception as e:
            logger.exception(f"IPC command failed: {command}")
            return {"success": False, "message": f"Error processing command: {e}"}

        logger.info(f"[IPC] {command} {' '.join(args)} -> {message}".strip())
        return {"success": success, "message": message}
