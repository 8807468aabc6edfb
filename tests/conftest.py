"""Pytest configuration and fixtures."""

import os
import shutil
from pathlib import Path
from typing import Any

import pytest
from exiftool.exceptions import ExifToolExecuteError
from fastapi.testclient import TestClient

from rayban_meta import config as rayban_config
from rayban_meta import ffmpeg
from rayban_meta.app import create_app
from rayban_meta.errors import ExternalToolFailure
from rayban_meta.metadata import exif


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Use default settings, never the user's config file."""
    monkeypatch.delenv(rayban_config.CONFIG_PATH_ENV, raising=False)
    monkeypatch.setattr(rayban_config, "DEFAULT_CONFIG_PATH", tmp_path / "config" / "config.json")
    rayban_config.reload_settings()
    yield
    rayban_config._settings = None


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(create_app())


class FakeExifTool:
    """In-memory stand-in for exiftool.ExifToolHelper.

    Written tags are kept per file path so read_metadata sees them.
    """

    version = "12.76"

    def __init__(self):
        self.tags: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, ...]] = []
        self.fail_write = False
        self.unavailable = False

    def __call__(self, executable=None, common_args=None, **kwargs):
        if self.unavailable:
            raise FileNotFoundError(f"{executable} not found")
        return self

    def run(self):
        pass

    def terminate(self):
        pass

    def execute(self, *params: str) -> str:
        self.calls.append(params)
        if self.fail_write:
            raise ExifToolExecuteError(1, "", "Error: Not a valid MP4", list(params))

        file_tags = self.tags.setdefault(params[-1], {})
        for param in params:
            if param.startswith("-") and "=" in param:
                tag, value = param[1:].split("=", 1)
                file_tags[tag] = value
        return ""

    def get_metadata(self, path: str) -> list[dict[str, Any]]:
        return [{"SourceFile": path, **self.tags.get(path, {})}]


@pytest.fixture
def fake_exiftool(monkeypatch) -> FakeExifTool:
    """Replace the exiftool process with an in-memory fake."""
    fake = FakeExifTool()
    monkeypatch.setattr(exif.exiftool, "ExifToolHelper", fake)
    return fake


class FakeFFmpeg:
    """Records ffmpeg operations and writes placeholder outputs."""

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []
        self.fail = False

    def _check(self, name: str, *args):
        self.calls.append((name, args))
        if self.fail:
            raise ExternalToolFailure("ffmpeg", "Conversion failed!")

    def transcode(self, input_path, output_path, options=None, config=None, on_progress=None):
        self._check("transcode", input_path, output_path, options, config)
        shutil.copyfile(input_path, output_path)
        if on_progress:
            on_progress(100.0)

    def optimize(self, input_path, output_path, config=None, on_progress=None):
        self._check("optimize", input_path, output_path, config)
        shutil.copyfile(input_path, output_path)

    def merge_videos(self, input_paths, output_path, on_progress=None):
        self._check("merge_videos", tuple(input_paths), output_path)
        Path(output_path).write_bytes(b"".join(Path(p).read_bytes() for p in input_paths))

    def create_thumbnail(self, input_path, output_path, timestamp="00:00:01", size="320x240"):
        self._check("create_thumbnail", input_path, output_path, timestamp, size)
        Path(output_path).write_bytes(b"jpeg")

    def extract_frames(self, input_path, output_dir, interval=1, fmt="jpg"):
        self._check("extract_frames", input_path, output_dir, interval, fmt)
        Path(output_dir).mkdir(parents=True, exist_ok=True)
        frames = []
        for i in range(1, 4):
            frame = Path(output_dir) / f"frame_{i:04d}.{fmt}"
            frame.write_bytes(b"img")
            frames.append(str(frame))
        return frames


@pytest.fixture
def fake_ffmpeg(monkeypatch) -> FakeFFmpeg:
    """Replace the ffmpeg operations used by the orchestrator."""
    fake = FakeFFmpeg()
    for name in ("transcode", "optimize", "merge_videos", "create_thumbnail", "extract_frames"):
        monkeypatch.setattr(ffmpeg, name, getattr(fake, name))
    return fake


@pytest.fixture
def video_dir(tmp_path) -> Path:
    """Directory with two videos, one non-video file and a nested video."""
    directory = tmp_path / "videos"
    directory.mkdir()
    (directory / "clip.mp4").write_bytes(b"first clip")
    (directory / "CLIP2.MOV").write_bytes(b"second clip")
    (directory / "notes.txt").write_text("not a video")
    nested = directory / "nested"
    nested.mkdir()
    (nested / "inner.mp4").write_bytes(b"nested clip")
    return directory


@pytest.fixture
def test_video_path():
    """Path to test video file.

    Set TEST_VIDEO_PATH environment variable to use a custom test video.
    """
    path = os.environ.get("TEST_VIDEO_PATH")
    if path and Path(path).exists():
        return path
    pytest.skip("TEST_VIDEO_PATH not set or file not found")
