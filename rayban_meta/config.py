"""Configuration settings for rayban-meta."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from rayban_meta.schemas import QualityTier

logger = logging.getLogger(__name__)

# =============================================================================
# Default Constants
# =============================================================================

# Config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "rayban-meta" / "config.json"
CONFIG_PATH_ENV = "RAYBAN_META_CONFIG"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "/tmp/rayban_meta.log"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# External binaries (names on PATH or absolute paths)
DEFAULT_FFMPEG_PATH = "ffmpeg"
DEFAULT_FFPROBE_PATH = "ffprobe"
DEFAULT_EXIFTOOL_PATH = "exiftool"

# Timeout for ffprobe calls (seconds). Encodes are not time-limited.
DEFAULT_FFPROBE_TIMEOUT = 30

# API server
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8010


# =============================================================================
# Settings (loaded from JSON config file)
# =============================================================================


class Settings(BaseModel):
    """Application settings loaded from JSON config file.

    Config file location: ~/.config/rayban-meta/config.json (or $RAYBAN_META_CONFIG)

    temp_dir: where transcoding intermediates go. None keeps them next to
    the input file.
    """

    # Logging
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str = DEFAULT_LOG_FILE

    # External tools
    ffmpeg_path: str = DEFAULT_FFMPEG_PATH
    ffprobe_path: str = DEFAULT_FFPROBE_PATH
    exiftool_path: str = DEFAULT_EXIFTOOL_PATH
    ffprobe_timeout: int = DEFAULT_FFPROBE_TIMEOUT

    # Processing
    default_quality: QualityTier = QualityTier.MEDIUM
    temp_dir: str | None = None

    # API server
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def get_config_path() -> Path:
    """Get the config file path.

    RAYBAN_META_CONFIG overrides the default location.
    """
    override = os.environ.get(CONFIG_PATH_ENV)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


def load_config_from_file(config_path: Path | None = None) -> dict[str, Any]:
    """Load raw configuration values from the JSON file.

    Returns:
        Dictionary of settings (empty if the file is missing or unreadable)
    """
    path = config_path or get_config_path()

    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config at {path}: expected a JSON object")
        return {}
    return data


def save_config_to_file(settings: Settings, config_path: Path | None = None) -> None:
    """Write settings to the JSON config file, creating its directory."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(settings.model_dump(mode="json"), f, indent=2)

    logger.info(f"Saved config to {path}")


# Cached settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get settings instance (loaded from config file on first call).

    Invalid values in the file are ignored as a whole; defaults are used.
    """
    global _settings

    if _settings is None:
        config_data = load_config_from_file()
        try:
            _settings = Settings(**config_data)
        except ValidationError as e:
            logger.warning(f"Invalid settings in {get_config_path()}, using defaults: {e}")
            _settings = Settings()
        else:
            if config_data:
                logger.info(f"Loaded settings from {get_config_path()}")

    return _settings


def reload_settings() -> Settings:
    """Drop the cached settings and load them again."""
    global _settings
    _settings = None
    return get_settings()
