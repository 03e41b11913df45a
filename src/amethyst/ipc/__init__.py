"""IPC (Inter-Process Communication) for Amethyst.

Enables external commands to communicate with a running Amethyst instance.
"""

from .client import send_command
from .server import IPCServer, get_socket_path

__all__ = ["send_command", "IPCServer", "get_socket_path"]
