"""
Folder listing for play-folder / load-folder commands.
"""

from pathlib import Path
from typing import Iterable

from loguru import logger

from amethyst.core.config import LibraryConfig


def is_supported_format(local_path: Path, allowed_extensions: Iterable[str]) -> bool:
    """Check if file format is supported (case-insensitive)."""
    return local_path.suffix.lower().lstrip(".") in set(allowed_extensions)


def list_audio_files(directory: Path, config: LibraryConfig) -> list[str]:
    """List playable files in ``directory``, sorted by path.

    Args:
        directory: Folder to scan
        config: Library configuration (allowed extensions, recursion)

    Returns:
        Absolute paths as strings; empty if the folder is missing or unreadable
    """
    directory = directory.expanduser()
    if not directory.is_dir():
        logger.warning(f"Not a directory: {directory}")
        return []

    extensions = {ext.lower().lstrip(".") for ext in config.allowed_extensions}
    pattern = "**/*" if config.scan_recursive else "*"

    try:
        files = [
            str(p.resolve())
            for p in directory.glob(pattern)
            if p.is_file() and is_supported_format(p, extensions)
        ]
    except PermissionError:
        logger.warning(f"Permission denied accessing: {directory}")
        return []

    files.sort()
    logger.debug(f"Found {len(files)} audio files in {directory}")
    return files
