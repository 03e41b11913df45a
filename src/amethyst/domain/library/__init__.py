"""Library domain - folder scanning."""

from .scanner import is_supported_format, list_audio_files

__all__ = ["is_supported_format", "list_audio_files"]
