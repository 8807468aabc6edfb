"""Tests for settings loading and persistence."""

import json

from rayban_meta import config
from rayban_meta.schemas import QualityTier


def test_defaults_without_file():
    settings = config.reload_settings()

    assert settings.ffmpeg_path == "ffmpeg"
    assert settings.exiftool_path == "exiftool"
    assert settings.default_quality == QualityTier.MEDIUM
    assert settings.temp_dir is None


def test_settings_cached():
    assert config.get_settings() is config.get_settings()


def test_load_from_file():
    path = config.DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"exiftool_path": "/usr/local/bin/exiftool", "port": 9100}))

    settings = config.reload_settings()

    assert settings.exiftool_path == "/usr/local/bin/exiftool"
    assert settings.port == 9100


def test_bad_file_falls_back_to_defaults():
    path = config.DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True)
    path.write_text("{not json")

    assert config.reload_settings().ffmpeg_path == "ffmpeg"


def test_save_and_reload():
    settings = config.get_settings()
    settings.default_quality = QualityTier.ULTRA
    config.save_config_to_file(settings)

    saved = json.loads(config.DEFAULT_CONFIG_PATH.read_text())
    assert saved["default_quality"] == "ultra"
    assert config.reload_settings().default_quality == QualityTier.ULTRA


def test_invalid_values_fall_back_to_defaults():
    path = config.DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"port": "not-a-port", "ffmpeg_path": "/opt/ffmpeg"}))

    settings = config.reload_settings()

    assert settings.port == config.DEFAULT_PORT
    assert settings.ffmpeg_path == "ffmpeg"


def test_log_level_normalized():
    assert config.Settings(log_level="debug").log_level == "DEBUG"


def test_config_path_env_override(monkeypatch, tmp_path):
    custom = tmp_path / "custom.json"
    custom.write_text(json.dumps({"ffprobe_timeout": 5}))
    monkeypatch.setenv(config.CONFIG_PATH_ENV, str(custom))

    assert config.get_config_path() == custom
    assert config.reload_settings().ffprobe_timeout == 5
