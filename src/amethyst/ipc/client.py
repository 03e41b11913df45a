"""IPC client for sending commands to a running Amethyst instance."""

import json
import socket
from pathlib import Path
from typing import List, Optional, Tuple

from .server import get_socket_path


def send_command(
    command: str, args: Optional[List[str]] = None, socket_path: Optional[Path] = None
) -> Tuple[bool, str]:
    """
    Send a command to the running Amethyst instance.

    Args:
        command: Command name (e.g., 'play-file', 'next', 'status')
        args: Command arguments (optional)
        socket_path: Control socket (default: get_socket_path())

    Returns:
        (success, message) tuple
    """
    socket_path = socket_path or get_socket_path()

    if not socket_path.exists():
        return False, "Amethyst is not running"

    payload = {"command": command, "args": args or []}

    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(5.0)
        sock.connect(str(socket_path))

        sock.sendall((json.dumps(payload) + "\n").encode("utf-8"))

        response_data = b""
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            response_data += chunk
            if b"\n" in response_data:
                break

        sock.close()

        if not response_data:
            return False, "No response from Amethyst"

        response = json.loads(response_data.decode("utf-8").strip())
        return response.get("success", False), response.get("message", "No message")

    except socket.timeout:
        return False, "Amethyst not responding (timeout)"
    except (ConnectionRefusedError, FileNotFoundError):
        return False, "Amethyst is not running"
    except json.JSONDecodeError as e:
        return False, f"Invalid response from Amethyst: {e}"
    except OSError as e:
        return False, f"Failed to send command: {e}"
