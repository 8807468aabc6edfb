"""ffprobe helpers: raw probe data and basic stream info."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from rayban_meta.config import get_settings
from rayban_meta.errors import ExternalToolFailure, ExternalToolUnavailable, ReadError
from rayban_meta.schemas import VideoInfo

logger = logging.getLogger(__name__)


def run_ffprobe(file_path: str | Path) -> dict[str, Any]:
    """Run ffprobe and return parsed JSON output.

    Args:
        file_path: Path to the media file

    Raises:
        ReadError: If the file does not exist or output cannot be parsed
        ExternalToolUnavailable: If ffprobe is not installed
        ExternalToolFailure: If ffprobe exits with an error or times out
    """
    if not Path(file_path).exists():
        raise ReadError(str(file_path), "file not found")

    settings = get_settings()
    cmd = [
        settings.ffprobe_path,
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(file_path),
    ]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=settings.ffprobe_timeout,
        )
    except FileNotFoundError as e:
        raise ExternalToolUnavailable("ffprobe") from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"ffprobe timed out after {settings.ffprobe_timeout}s for {file_path}")
        raise ExternalToolFailure("ffprobe", f"timed out for {file_path}") from e
    except subprocess.CalledProcessError as e:
        logger.error(f"ffprobe failed: {e.stderr}")
        raise ExternalToolFailure("ffprobe", e.stderr or f"exit status {e.returncode}") from e

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse ffprobe output: {e}")
        raise ReadError(str(file_path), f"invalid ffprobe output: {e}") from e


def parse_fps(frame_rate: str | None) -> float:
    """Parse an ffprobe frame rate ("30000/1001" or "30") to a float.

    Returns 0 when missing or malformed.
    """
    if not frame_rate:
        return 0.0

    try:
        if "/" in frame_rate:
            num, den = frame_rate.split("/")
            if float(den) == 0:
                return 0.0
            return float(num) / float(den)
        return float(frame_rate)
    except ValueError:
        return 0.0


def time_to_seconds(timemark: str) -> float:
    """Convert an ffmpeg timemark (HH:MM:SS.ms) to seconds."""
    parts = timemark.strip().split(":")
    seconds = 0.0
    for part in parts:
        seconds = seconds * 60 + float(part)
    return seconds


def get_video_info(file_path: str | Path) -> VideoInfo:
    """Get basic information about a video file.

    Raises:
        ReadError: If the file has no video stream or cannot be probed
    """
    probe_data = run_ffprobe(file_path)
    format_info = probe_data.get("format", {})

    video_stream = next(
        (s for s in probe_data.get("streams", []) if s.get("codec_type") == "video"),
        None,
    )
    if video_stream is None:
        raise ReadError(str(file_path), "no video stream found")

    return VideoInfo(
        duration=float(format_info.get("duration") or 0),
        width=int(video_stream.get("width") or 0),
        height=int(video_stream.get("height") or 0),
        fps=parse_fps(video_stream.get("r_frame_rate") or video_stream.get("avg_frame_rate")),
        bitrate=int(format_info.get("bit_rate") or 0),
        codec=video_stream.get("codec_name") or "unknown",
        size=int(format_info.get("size") or 0),
    )


def get_duration(file_path: str | Path) -> float:
    """Get duration in seconds (0 if unknown)."""
    probe_data = run_ffprobe(file_path)
    return float(probe_data.get("format", {}).get("duration") or 0)
