"""Transcoding and frame operations with FFmpeg.

Every operation is a one-shot ffmpeg invocation (two for stabilization).
Commands are built by pure functions so they can be inspected and tested
without running ffmpeg.

Progress is read from `-progress pipe:1` on stdout and reported as a
percentage of the source duration, clamped to 100.
"""

import logging
import os
import re
import subprocess
import tempfile
import threading
from collections import deque
from collections.abc import Callable, Iterator, Sequence
from typing import IO
from contextlib import contextmanager
from pathlib import Path

from rayban_meta.config import get_settings
from rayban_meta.errors import (
    ExternalToolFailure,
    ExternalToolUnavailable,
    InsufficientInputsError,
)
from rayban_meta.presets import PresetTable, get_presets
from rayban_meta.schemas import (
    DeviceProfile,
    ProcessingOptions,
    QualityTier,
    RayBanConfig,
    ToolCapabilities,
)

from .probe import get_duration, get_video_info, time_to_seconds

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# Two-pass stabilization filters (libvidstab)
VIDSTAB_DETECT = "vidstabdetect=stepsize=6:shakiness=8:accuracy=9:result={path}"
VIDSTAB_TRANSFORM = "vidstabtransform=input={path}:zoom=1:smoothing=30"

WATERMARK_FILTER = "drawtext=text='{text}':fontsize=20:fontcolor=white:x=10:y=10"
WATERMARK_LABELS = {"stories": "Meta Ray-Ban Stories", "meta": "Meta Ray-Ban Meta"}

AUDIO_BITRATE = "128k"
FRAME_FORMATS = ("jpg", "png")

# Last stderr lines kept for error messages
STDERR_TAIL_LINES = 50

# Version check should be near-instant
VERSION_CHECK_TIMEOUT = 10

_PROGRESS_TIME = re.compile(r"^out_time=(\d+:\d{2}:\d{2}(?:\.\d+)?)\s*$")


def _ffmpeg_base() -> list[str]:
    return [get_settings().ffmpeg_path, "-y", "-hide_banner", "-loglevel", "error"]


def _format_number(value: float) -> str:
    """Format 30.0 as "30" and 29.97 as "29.97"."""
    return str(int(value)) if float(value).is_integer() else str(value)


def watermark_filter(profile: DeviceProfile) -> str:
    """Get the drawtext filter naming a device profile."""
    text = WATERMARK_LABELS.get(profile.name, f"Meta Ray-Ban {profile.name}")
    return WATERMARK_FILTER.format(text=text)


# =============================================================================
# Command builders
# =============================================================================


def build_stabilize_detect_command(input_path: str | Path, transform_path: str | Path) -> list[str]:
    """Build the analysis pass of two-pass stabilization."""
    return [
        *_ffmpeg_base(),
        "-i", str(input_path),
        "-vf", VIDSTAB_DETECT.format(path=transform_path),
        "-f", "null",
        "-",
    ]


def build_transcode_command(
    input_path: str | Path,
    output_path: str | Path,
    options: ProcessingOptions | None = None,
    config: RayBanConfig | None = None,
    transform_path: str | Path | None = None,
    presets: PresetTable | None = None,
) -> list[str]:
    """Build the ffmpeg command for a transcode.

    The device profile for the camera type supplies resolution, fps and
    bitrate; explicit options win. The quality tier supplies crf and the
    x264 preset; an explicit preset wins.

    Args:
        input_path: Source video
        output_path: Destination video
        options: Processing options
        config: Camera/audio configuration
        transform_path: vidstab transform file (required when stabilizing)
        presets: Preset table (defaults to the process-wide table)

    Raises:
        ValueError: If stabilization is requested without a transform file
    """
    options = options or ProcessingOptions()
    config = config or RayBanConfig()
    presets = presets or get_presets()

    profile = presets.device_profiles[config.camera_type]
    quality = presets.quality[options.quality]

    resolution = options.resolution or profile.resolution
    fps = options.fps if options.fps is not None else profile.fps
    bitrate = options.bitrate or profile.bitrate

    cmd = [
        *_ffmpeg_base(),
        "-i", str(input_path),
        "-c:v", "libx264",
        "-crf", str(quality.crf),
        "-preset", options.preset or quality.preset,
        "-movflags", "+faststart",  # Optimize for web playback
        "-pix_fmt", "yuv420p",  # Ensure compatibility
        "-s", resolution,
        "-r", _format_number(fps),
        "-b:v", bitrate,
    ]

    if config.has_audio:
        channels = presets.camera(config.camera_type).audio_channels
        cmd.extend(["-c:a", "aac", "-b:a", AUDIO_BITRATE, "-ac", str(channels)])
    else:
        cmd.append("-an")

    filters: list[str] = []
    if options.stabilize:
        if transform_path is None:
            raise ValueError("Stabilization requires a transform file from the detect pass")
        filters.append(VIDSTAB_TRANSFORM.format(path=transform_path))
    if options.add_watermark:
        filters.append(watermark_filter(profile))
    if filters:
        cmd.extend(["-vf", ",".join(filters)])

    cmd.extend(["-progress", "pipe:1", "-nostats", str(output_path)])
    return cmd


def build_merge_command(input_paths: Sequence[str | Path], output_path: str | Path) -> list[str]:
    """Build a concat-filter merge of several videos (each with audio).

    Raises:
        InsufficientInputsError: If fewer than 2 inputs are given
    """
    if len(input_paths) < 2:
        raise InsufficientInputsError(len(input_paths))

    cmd = _ffmpeg_base()
    for path in input_paths:
        cmd.extend(["-i", str(path)])

    count = len(input_paths)
    filter_inputs = "".join(f"[{i}:v][{i}:a]" for i in range(count))
    cmd.extend([
        "-filter_complex", f"{filter_inputs}concat=n={count}:v=1:a=1[outv][outa]",
        "-map", "[outv]",
        "-map", "[outa]",
        "-c:v", "libx264",
        "-c:a", "aac",
        "-preset", "fast",
        "-movflags", "+faststart",
        "-progress", "pipe:1",
        "-nostats",
        str(output_path),
    ])
    return cmd


def build_add_audio_command(
    video_path: str | Path,
    audio_path: str | Path,
    output_path: str | Path,
    replace: bool = False,
) -> list[str]:
    """Build a command that replaces or mixes in an audio track.

    Video is stream-copied. When mixing, the new track is attenuated to 50%.
    """
    cmd = [*_ffmpeg_base(), "-i", str(video_path), "-i", str(audio_path)]
    if replace:
        cmd.extend(["-map", "0:v:0", "-map", "1:a:0"])
    else:
        cmd.extend([
            "-filter_complex", "[1:a]volume=0.5[a1];[0:a][a1]amix=inputs=2[out]",
            "-map", "0:v",
            "-map", "[out]",
        ])
    cmd.extend(["-c:v", "copy", "-c:a", "aac", str(output_path)])
    return cmd


# =============================================================================
# Execution
# =============================================================================


def parse_progress_line(line: str) -> float | None:
    """Get encoded seconds from an `-progress` line, if it carries out_time."""
    match = _PROGRESS_TIME.match(line.strip())
    if not match:
        return None
    return time_to_seconds(match.group(1))


def _report_progress(on_progress: ProgressCallback, percent: float) -> None:
    """Invoke a progress callback; its failures never affect the encode."""
    try:
        on_progress(percent)
    except Exception as e:
        logger.warning(f"Progress callback raised: {e}")


def _drain_stderr(stream: IO[str], tail: deque[str]) -> None:
    for line in stream:
        if line.strip():
            tail.append(line.strip())


def run_ffmpeg(
    cmd: list[str],
    duration: float = 0.0,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Run an ffmpeg command to completion.

    Args:
        cmd: Full command line
        duration: Total source duration used for progress percentages
        on_progress: Optional callback receiving 0-100

    Raises:
        ExternalToolUnavailable: If ffmpeg is not installed
        ExternalToolFailure: If ffmpeg exits non-zero
    """
    logger.debug(f"FFmpeg command: {' '.join(cmd)}")

    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise ExternalToolUnavailable("ffmpeg") from e

    # stderr drains on its own thread while stdout carries progress
    stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
    stderr_thread = threading.Thread(
        target=_drain_stderr, args=(process.stderr, stderr_tail), daemon=True
    )
    stderr_thread.start()

    for line in process.stdout:  # type: ignore[union-attr]
        if on_progress is None or duration <= 0:
            continue
        seconds = parse_progress_line(line)
        if seconds is not None:
            _report_progress(on_progress, min(seconds / duration * 100, 100.0))

    process.wait()
    stderr_thread.join()

    if process.returncode != 0:
        message = stderr_tail[-1] if stderr_tail else f"exit status {process.returncode}"
        logger.error(f"FFmpeg failed ({process.returncode}): {' | '.join(stderr_tail)}")
        raise ExternalToolFailure("ffmpeg", message)


@contextmanager
def _transform_file() -> Iterator[str]:
    """Temporary vidstab transform file, removed on exit."""
    fd, path = tempfile.mkstemp(suffix=".trf", dir=get_settings().temp_dir)
    os.close(fd)
    try:
        yield path
    finally:
        Path(path).unlink(missing_ok=True)


# =============================================================================
# Operations
# =============================================================================


def transcode(
    input_path: str | Path,
    output_path: str | Path,
    options: ProcessingOptions | None = None,
    config: RayBanConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Transcode a video with the glasses' device profile.

    Raises:
        ReadError: If the input cannot be probed
        ExternalToolUnavailable: If ffmpeg/ffprobe are not installed
        ExternalToolFailure: If ffmpeg fails
    """
    options = options or ProcessingOptions()
    config = config or RayBanConfig()

    info = get_video_info(input_path)
    logger.info(
        f"Transcoding {input_path} ({info.width}x{info.height}, {info.duration:.1f}s) "
        f"quality={options.quality} camera={config.camera_type}"
    )

    if options.stabilize:
        with _transform_file() as transform_path:
            run_ffmpeg(build_stabilize_detect_command(input_path, transform_path))
            cmd = build_transcode_command(
                input_path, output_path, options, config, transform_path=transform_path
            )
            run_ffmpeg(cmd, info.duration, on_progress)
    else:
        cmd = build_transcode_command(input_path, output_path, options, config)
        run_ffmpeg(cmd, info.duration, on_progress)

    if on_progress:
        _report_progress(on_progress, 100.0)


def optimize(
    input_path: str | Path,
    output_path: str | Path,
    config: RayBanConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Transcode at high quality with stabilization."""
    options = ProcessingOptions(quality=QualityTier.HIGH, stabilize=True, add_watermark=False)
    transcode(input_path, output_path, options, config, on_progress)


def create_thumbnail(
    input_path: str | Path,
    output_path: str | Path,
    timestamp: str = "00:00:01",
    size: str = "320x240",
) -> None:
    """Write a single frame at `timestamp` scaled to `size`."""
    cmd = [
        *_ffmpeg_base(),
        "-ss", timestamp,
        "-i", str(input_path),
        "-s", size,
        "-frames:v", "1",
        str(output_path),
    ]
    run_ffmpeg(cmd)


def extract_frames(
    input_path: str | Path,
    output_dir: str | Path,
    interval: float = 1,
    fmt: str = "jpg",
) -> list[str]:
    """Extract one frame every `interval` seconds.

    Existing frame_NNNN files of the same format in output_dir are removed
    first.

    Returns:
        Sorted paths of the written frame_NNNN files

    Raises:
        ValueError: If the format or interval is invalid
    """
    if fmt not in FRAME_FORMATS:
        raise ValueError(f"Unsupported frame format: {fmt} (use {', '.join(FRAME_FORMATS)})")
    if interval <= 0:
        raise ValueError(f"Frame interval must be positive, got {interval}")

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    for stale in out_dir.glob(f"frame_*.{fmt}"):
        stale.unlink()

    cmd = [
        *_ffmpeg_base(),
        "-i", str(input_path),
        "-vf", f"fps=1/{_format_number(interval)}",
        "-q:v", "2",
        str(out_dir / f"frame_%04d.{fmt}"),
    ]
    run_ffmpeg(cmd)

    return sorted(str(p) for p in out_dir.glob(f"frame_*.{fmt}"))


def merge_videos(
    input_paths: Sequence[str | Path],
    output_path: str | Path,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Concatenate videos into one file.

    Raises:
        InsufficientInputsError: If fewer than 2 inputs (before running anything)
    """
    cmd = build_merge_command(input_paths, output_path)

    duration = 0.0
    if on_progress:
        duration = sum(get_duration(path) for path in input_paths)

    logger.info(f"Merging {len(input_paths)} videos into {output_path}")
    run_ffmpeg(cmd, duration, on_progress)


def add_audio(
    video_path: str | Path,
    audio_path: str | Path,
    output_path: str | Path,
    replace: bool = False,
) -> None:
    """Replace a video's audio track, or mix a second track into it."""
    run_ffmpeg(build_add_audio_command(video_path, audio_path, output_path, replace))


# =============================================================================
# Capabilities
# =============================================================================


def check_ffmpeg() -> bool:
    """Check if ffmpeg can be started."""
    try:
        result = subprocess.run(
            [get_settings().ffmpeg_path, "-version"],
            capture_output=True,
            text=True,
            timeout=VERSION_CHECK_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"ffmpeg check failed: {e}")
        return False
    return result.returncode == 0


def _run_listing(flag: str) -> str:
    try:
        result = subprocess.run(
            [get_settings().ffmpeg_path, "-hide_banner", flag],
            capture_output=True,
            text=True,
            check=True,
            timeout=VERSION_CHECK_TIMEOUT,
        )
    except FileNotFoundError as e:
        raise ExternalToolUnavailable("ffmpeg") from e
    except subprocess.CalledProcessError as e:
        raise ExternalToolFailure("ffmpeg", e.stderr or f"exit status {e.returncode}") from e
    except subprocess.TimeoutExpired as e:
        raise ExternalToolFailure("ffmpeg", f"{flag} timed out") from e
    return result.stdout


def _listing_rows(output: str) -> Iterator[str]:
    """Yield the rows after the dashed separator of an ffmpeg listing."""
    in_body = False
    for line in output.splitlines():
        if not in_body:
            in_body = bool(line.strip()) and set(line.strip()) == {"-"}
            continue
        if line.strip():
            yield line


def parse_codecs(output: str) -> list[str]:
    """Parse `ffmpeg -codecs` output into codec names."""
    codecs: list[str] = []
    for row in _listing_rows(output):
        parts = row.split()
        if len(parts) >= 2:
            codecs.append(parts[1])
    return codecs


_FORMAT_ROW = re.compile(r"^ [D ][E ][d ]? +(\S+)")


def parse_formats(output: str) -> list[str]:
    """Parse `ffmpeg -formats` output into format names.

    Comma-joined aliases (mov,mp4,m4a) are split into separate entries.
    """
    formats: list[str] = []
    for row in _listing_rows(output):
        match = _FORMAT_ROW.match(row)
        if not match:
            continue
        for name in match.group(1).split(","):
            if name not in formats:
                formats.append(name)
    return formats


def get_capabilities() -> ToolCapabilities:
    """Get the codecs and formats this ffmpeg build supports."""
    return ToolCapabilities(
        codecs=parse_codecs(_run_listing("-codecs")),
        formats=parse_formats(_run_listing("-formats")),
    )
