"""
Configuration management for Amethyst
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

DEFAULT_EXTENSIONS = ["ogg", "flac", "wav", "opus", "aac", "aiff", "mp3", "m4a"]


@dataclass
class PlayerConfig:
    """Configuration for playback settings."""

    volume: float = 1.0  # 0.0 - 1.0, used until a volume has been persisted
    seek_step: float = 5.0  # seconds
    tick_interval: float = 1.0  # presence/progress report interval in seconds
    mpv_socket_path: Optional[str] = None


@dataclass
class EnrichmentConfig:
    """Configuration for background tempo and artwork analysis."""

    bpm_concurrency: int = 3
    cover_concurrency: int = 10
    prefetch_covers: bool = False
    min_bpm: float = 90.0
    max_bpm: float = 180.0

    def validate(self) -> None:
        """Validate enrichment configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.bpm_concurrency < 1 or self.cover_concurrency < 1:
            raise ValueError(
                f"Concurrency limits must be >= 1 "
                f"(bpm={self.bpm_concurrency}, cover={self.cover_concurrency})"
            )
        if not 0 < self.min_bpm < self.max_bpm:
            raise ValueError(
                f"Invalid BPM range: {self.min_bpm} - {self.max_bpm}"
            )


@dataclass
class LibraryConfig:
    """Configuration for folder loading."""

    allowed_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS)
    )
    scan_recursive: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: ~/.local/share/amethyst/amethyst.log
    console_output: bool = False


@dataclass
class IPCConfig:
    """Configuration for IPC (Inter-Process Communication)."""

    enabled: bool = True
    socket_path: Optional[str] = None


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ipc: IPCConfig = field(default_factory=IPCConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "amethyst"
    return Path.home() / ".config" / "amethyst"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "amethyst"
    return Path.home() / ".local" / "share" / "amethyst"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/amethyst (or ~/.config/amethyst)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Amethyst Configuration

[player]
# Initial volume (0.0 - 1.0) used until a volume has been saved
volume = 1.0

# Seconds to jump on seek forward/backward
seek_step = 5.0

# Seconds between progress/presence updates
tick_interval = 1.0

# Path for mpv socket (auto-detected if not specified)
# mpv_socket_path = "/tmp/amethyst-mpv.sock"

[enrichment]
# Maximum simultaneous tempo analyses (decoding is CPU and memory heavy)
bpm_concurrency = 3

# Maximum simultaneous cover art extractions
cover_concurrency = 10

# Extract cover art for the whole queue in the background
prefetch_covers = false

# Tempo search range in beats per minute
min_bpm = 90.0
max_bpm = 180.0

[library]
# Extensions accepted for single-file enqueue and folder loading
allowed_extensions = ["ogg", "flac", "wav", "opus", "aac", "aiff", "mp3", "m4a"]

# Recurse into subfolders when loading a folder
scan_recursive = true

[logging]
# Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/amethyst/amethyst.log)
# log_file = "/path/to/amethyst.log"

# Also output logs to console (useful for debugging)
console_output = false

[ipc]
# Accept commands from `amethyst play-file ...` and friends
enabled = true

# socket_path = "/run/user/1000/amethyst/control.sock"
""".strip()


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, keeping defaults for missing keys."""
    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        volume = float(player_data.get("volume", config.player.volume))
        if not 0.0 <= volume <= 1.0:
            logger.warning(f"Ignoring out-of-range player.volume={volume}")
            volume = config.player.volume
        config.player = PlayerConfig(
            volume=volume,
            seek_step=float(player_data.get("seek_step", config.player.seek_step)),
            tick_interval=float(
                player_data.get("tick_interval", config.player.tick_interval)
            ),
            mpv_socket_path=player_data.get("mpv_socket_path"),
        )

    if "enrichment" in toml_data:
        enrichment_data = toml_data["enrichment"]
        config.enrichment = EnrichmentConfig(
            bpm_concurrency=int(
                enrichment_data.get("bpm_concurrency", config.enrichment.bpm_concurrency)
            ),
            cover_concurrency=int(
                enrichment_data.get(
                    "cover_concurrency", config.enrichment.cover_concurrency
                )
            ),
            prefetch_covers=enrichment_data.get(
                "prefetch_covers", config.enrichment.prefetch_covers
            ),
            min_bpm=float(enrichment_data.get("min_bpm", config.enrichment.min_bpm)),
            max_bpm=float(enrichment_data.get("max_bpm", config.enrichment.max_bpm)),
        )

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            allowed_extensions=[
                ext.lower().lstrip(".")
                for ext in library_data.get(
                    "allowed_extensions", config.library.allowed_extensions
                )
            ],
            scan_recursive=library_data.get(
                "scan_recursive", config.library.scan_recursive
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    if "ipc" in toml_data:
        ipc_data = toml_data["ipc"]
        config.ipc = IPCConfig(
            enabled=ipc_data.get("enabled", config.ipc.enabled),
            socket_path=ipc_data.get("socket_path"),
        )

    apply_env_overrides(config)

    try:
        config.enrichment.validate()
    except ValueError as e:
        logger.warning(f"Invalid enrichment configuration: {e}. Using defaults.")
        config.enrichment = EnrichmentConfig()

    return config


def apply_env_overrides(config: Config) -> None:
    """Override TOML values with environment variables if present.

    - AMETHYST_BPM_CONCURRENCY
    - AMETHYST_COVER_CONCURRENCY
    - AMETHYST_LOG_LEVEL
    """
    bpm_concurrency = os.environ.get("AMETHYST_BPM_CONCURRENCY")
    cover_concurrency = os.environ.get("AMETHYST_COVER_CONCURRENCY")
    log_level = os.environ.get("AMETHYST_LOG_LEVEL")

    try:
        if bpm_concurrency:
            config.enrichment.bpm_concurrency = int(bpm_concurrency)
        if cover_concurrency:
            config.enrichment.cover_concurrency = int(cover_concurrency)
    except ValueError:
        logger.warning("Ignoring non-integer concurrency override from environment")

    if log_level:
        config.logging.level = log_level.upper()


def load_config() -> Config:
    """Load configuration from file or create default."""
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        config = Config()
        apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Error loading configuration from {config_path}: {e}")
        return Config()

    return parse_config(toml_data)


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
