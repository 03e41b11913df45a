"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Persistent settings (SQLite key-value)
- Logging (Loguru)
"""

from .config import (
    Config,
    EnrichmentConfig,
    IPCConfig,
    LibraryConfig,
    LoggingConfig,
    PlayerConfig,
    ensure_directories,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)
from .exceptions import (
    AmethystError,
    AnalysisError,
    HostCommandError,
    MetadataError,
    TransportError,
    UnknownHostCommand,
)
from .output import log, setup_from_config, setup_loguru
from .settings import SettingsStore, get_settings_path

__all__ = [
    # Config
    "Config",
    "EnrichmentConfig",
    "IPCConfig",
    "LibraryConfig",
    "LoggingConfig",
    "PlayerConfig",
    "ensure_directories",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    # Exceptions
    "AmethystError",
    "AnalysisError",
    "HostCommandError",
    "MetadataError",
    "TransportError",
    "UnknownHostCommand",
    # Output
    "log",
    "setup_from_config",
    "setup_loguru",
    # Settings
    "SettingsStore",
    "get_settings_path",
]
