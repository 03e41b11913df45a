"""Amethyst exception hierarchy."""


class AmethystError(Exception):
    """Base exception for Amethyst errors."""


class HostCommandError(AmethystError):
    """A host command failed to produce a value."""

    def __init__(self, command: str, message: str) -> None:
        self.command = command
        super().__init__(f"{command}: {message}")


class UnknownHostCommand(HostCommandError):
    """No handler is registered for the requested host command."""

    def __init__(self, command: str) -> None:
        super().__init__(command, "no handler registered")


class AnalysisError(AmethystError):
    """Audio could not be decoded or analyzed."""


class MetadataError(AmethystError):
    """Tags or embedded artwork could not be read from a file."""


class TransportError(AmethystError):
    """The audio output backend is unavailable or rejected a command."""
