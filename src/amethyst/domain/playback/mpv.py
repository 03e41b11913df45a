"""
MPV transport with JSON IPC for Amethyst

One mpv process per backend; each MpvTransport is a handle for one loaded file.
"""

import asyncio
import json
import os
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from amethyst.core.config import PlayerConfig
from amethyst.core.exceptions import TransportError

END_POLL_INTERVAL = 0.5


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            ["mpv", "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send a JSON IPC command to MPV and return the decoded response."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(socket_path)
            sock.sendall((json.dumps(command) + "\n").encode("utf-8"))

            # mpv may interleave async events; the reply is the line with "error"
            with sock.makefile("rb") as stream:
                for line in stream:
                    try:
                        data = json.loads(line)
                    except ValueError:
                        continue
                    if isinstance(data, dict) and "error" in data:
                        return data
    except OSError:
        return None
    return None


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    response = send_mpv_command(
        socket_path, {"command": ["get_property", property_name]}
    )
    if response and response.get("error") == "success":
        return response.get("data")
    return None


def set_mpv_property(socket_path: Optional[str], property_name: str, value: Any) -> bool:
    response = send_mpv_command(
        socket_path, {"command": ["set_property", property_name, value]}
    )
    return bool(response and response.get("error") == "success")


class MpvBackend:
    """Owns the mpv process and hands out per-file transports."""

    def __init__(self, config: PlayerConfig) -> None:
        if config.mpv_socket_path:
            self.socket_path = config.mpv_socket_path
        else:
            self.socket_path = str(
                Path(tempfile.gettempdir()) / f"amethyst-mpv-{os.getpid()}"
            )
        self.process: Optional[subprocess.Popen] = None

    def start(self) -> None:
        """Start MPV with JSON IPC.

        Raises:
            TransportError: If mpv is missing or its socket never appears
        """
        if not check_mpv_available():
            raise TransportError("mpv not found. Install: apt install mpv")

        logger.info(f"Starting MPV player with socket: {self.socket_path}")

        if os.path.exists(self.socket_path):
            logger.debug(f"Removing existing socket: {self.socket_path}")
            os.unlink(self.socket_path)

        cmd = [
            "mpv",
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={self.socket_path}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]
        self.process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        timeout = 5.0
        start_time = time.time()
        while not os.path.exists(self.socket_path):
            if time.time() - start_time > timeout:
                self.process.kill()
                raise TransportError(f"MPV socket creation timeout after {timeout}s")
            time.sleep(0.1)

        logger.info("MPV started successfully")

    def stop(self) -> None:
        """Stop MPV process and cleanup."""
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired):
                pass
            self.process = None

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass

    def is_running(self) -> bool:
        return (
            self.process is not None
            and self.process.poll() is None
            and os.path.exists(self.socket_path)
        )

    def open(self, path: str) -> "MpvTransport":
        """Transport factory: load ``path`` paused, ready for play()."""
        if not self.is_running():
            raise TransportError("mpv is not running")
        set_mpv_property(self.socket_path, "pause", True)
        response = send_mpv_command(
            self.socket_path, {"command": ["loadfile", path, "replace"]}
        )
        if not response or response.get("error") != "success":
            raise TransportError(f"mpv refused to load {path}")
        return MpvTransport(self.socket_path, path)


class MpvTransport:
    """Handle to one file loaded into mpv."""

    def __init__(self, socket_path: str, path: str) -> None:
        self.socket_path = socket_path
        self.path = path
        self._volume = 1.0
        self._released = False
        self._ended_callback: Optional[Callable[[], None]] = None
        self._watcher: Optional[asyncio.Task] = None

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value
        if not self._released:
            set_mpv_property(self.socket_path, "volume", max(0, min(100, value * 100)))

    @property
    def current_time(self) -> float:
        if self._released:
            return 0.0
        return get_mpv_property(self.socket_path, "time-pos") or 0.0

    @current_time.setter
    def current_time(self, seconds: float) -> None:
        if not self._released:
            send_mpv_command(
                self.socket_path, {"command": ["seek", seconds, "absolute"]}
            )

    @property
    def duration(self) -> float:
        if self._released:
            return 0.0
        return get_mpv_property(self.socket_path, "duration") or 0.0

    def play(self) -> None:
        if self._released:
            return
        set_mpv_property(self.socket_path, "pause", False)
        self._start_watcher()

    def pause(self) -> None:
        if not self._released:
            set_mpv_property(self.socket_path, "pause", True)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._watcher:
            self._watcher.cancel()
            self._watcher = None
        send_mpv_command(self.socket_path, {"command": ["stop"]})

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended_callback = callback

    def _start_watcher(self) -> None:
        if self._watcher is not None:
            return
        try:
            self._watcher = asyncio.get_running_loop().create_task(self._watch_end())
        except RuntimeError:
            logger.warning("No running event loop; end-of-track detection disabled")

    async def _watch_end(self) -> None:
        """Poll eof-reached (mpv runs with --keep-open) and fire the callback once."""
        while not self._released:
            await asyncio.sleep(END_POLL_INTERVAL)
            eof = await asyncio.to_thread(
                get_mpv_property, self.socket_path, "eof-reached"
            )
            if eof is True:
                logger.debug(f"Track finished: {self.path}")
                self._watcher = None
                if self._ended_callback and not self._released:
                    self._ended_callback()
                return
