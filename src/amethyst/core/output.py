"""
Unified output system using Loguru.
Configures the log file sink and provides log() for user-facing messages.
"""

import sys
from pathlib import Path

from loguru import logger

from .config import LoggingConfig, get_data_dir


def get_log_file_path() -> Path:
    """Get the default path to the log file."""
    return get_data_dir() / "amethyst.log"


def setup_loguru(log_file: Path, level: str = "INFO", console_output: bool = False) -> None:
    """
    Configure loguru with a rotating file sink and an optional console sink.

    Args:
        log_file: Path to log file
        level: Minimum level for logging (TRACE, DEBUG, INFO, WARNING, ERROR)
        console_output: Also log to stderr
    """
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def setup_from_config(config: LoggingConfig) -> None:
    """Configure logging from the [logging] config section."""
    log_file = Path(config.log_file) if config.log_file else get_log_file_path()
    setup_loguru(log_file, level=config.level, console_output=config.console_output)


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints to the terminal.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    stream = sys.stderr if level in ("warning", "error") else sys.stdout
    print(message, file=stream)
