"""File orchestration: validate, transcode, relocate, stamp, clean up.

Single-file operations never raise for tool or filesystem failures; they
return a ProcessResult with success=False and log the error. The only
exception is merge_videos with fewer than two inputs, which is rejected
before any work starts.

Batch processing is strictly sequential. A failed file is counted and the
loop moves on.
"""

import logging
import shutil
import time
from collections.abc import Sequence
from pathlib import Path

from rayban_meta import ffmpeg
from rayban_meta.config import get_settings
from rayban_meta.errors import (
    InsufficientInputsError,
    RayBanError,
    ReadError,
    UnsupportedFileType,
)
from rayban_meta.ffmpeg import ProgressCallback
from rayban_meta.metadata import resolve, write_metadata

# Re-exported delegations
from rayban_meta.ffmpeg import check_ffmpeg, get_video_info  # noqa: F401
from rayban_meta.ffmpeg import get_capabilities as get_ffmpeg_capabilities  # noqa: F401
from rayban_meta.metadata import check_exiftool, verify_metadata  # noqa: F401
from rayban_meta.schemas import (
    BatchResult,
    Compatibility,
    FramesResult,
    ProcessingOptions,
    ProcessResult,
    RayBanConfig,
    VideoAnalysis,
    VideoFile,
)

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi", ".mkv", ".m4v", ".webm")

# Output name suffixes
RAYBAN_SUFFIX = "_rayban"
FRONT_SUFFIX = "_front"
PROCESSED_SUFFIX = "processed"
OPTIMIZED_SUFFIX = "optimized"
BATCH_PREFIX = "rayban_"

# Analysis thresholds
MIN_WIDTH = 1280
MIN_HEIGHT = 720
MIN_FPS = 24
MIN_BITRATE = 1_000_000  # 1 Mbps


# =============================================================================
# Paths
# =============================================================================


def is_video_file(file_path: str | Path) -> bool:
    """Check if a path has a recognized video extension (case-insensitive)."""
    return Path(file_path).suffix.lower() in VIDEO_EXTENSIONS


def get_video_files(directory: str | Path) -> list[VideoFile]:
    """List video files directly inside a directory (not recursive).

    Raises:
        NotADirectoryError: If the path is not an existing directory
    """
    dir_path = Path(directory)
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    video_files: list[VideoFile] = []
    for entry in sorted(dir_path.iterdir()):
        if entry.is_file() and is_video_file(entry):
            video_files.append(
                VideoFile(
                    path=str(entry),
                    name=entry.name,
                    size=entry.stat().st_size,
                    extension=entry.suffix,
                )
            )

    return video_files


def generate_output_path(
    input_path: str | Path,
    front_camera: bool = False,
    suffix: str | None = None,
) -> Path:
    """Default output path: <stem>_rayban[_front][_<suffix>]<ext> beside the input."""
    path = Path(input_path)
    name = path.stem + RAYBAN_SUFFIX
    if front_camera:
        name += FRONT_SUFFIX
    if suffix:
        name += f"_{suffix}"
    return path.with_name(name + path.suffix)


def generate_temp_path(input_path: str | Path, suffix: str) -> Path:
    """Temporary path for an intermediate file: <stem>_<suffix>_<epoch ms><ext>.

    Lives in settings.temp_dir if set, otherwise beside the input.
    """
    path = Path(input_path)
    temp_dir = get_settings().temp_dir
    directory = Path(temp_dir) if temp_dir else path.parent
    stamp = int(time.time() * 1000)
    return directory / f"{path.stem}_{suffix}_{stamp}{path.suffix}"


def _validate_input(input_path: str | Path) -> None:
    if not is_video_file(input_path):
        raise UnsupportedFileType(str(input_path))
    if not Path(input_path).is_file():
        raise ReadError(str(input_path), "file not found")


def _remove_temp_file(temp_path: Path) -> None:
    try:
        temp_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {temp_path}: {e}")


def _failure(error: Exception, output_path: str | Path | None = None) -> ProcessResult:
    return ProcessResult(
        success=False,
        output_path=str(output_path) if output_path else None,
        error=str(error),
        error_type=type(error).__name__,
    )


# =============================================================================
# Single-file operations
# =============================================================================


def add_metadata(
    input_path: str | Path,
    output_path: str | Path | None = None,
    config: RayBanConfig | None = None,
    process: bool = False,
    options: ProcessingOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Stamp metadata onto a video, optionally transcoding it first.

    Steps: validate -> (transcode to a temp file) -> copy to the output
    path -> write tags -> remove the temp file. The input is never modified
    unless it is also the output path.

    If writing tags fails, the copied output is left in place untagged and
    its path is reported in the result. Earlier failures report no output.

    Args:
        input_path: Source video
        output_path: Destination (default: generate_output_path)
        config: Metadata configuration
        process: Transcode with ffmpeg before stamping
        options: Transcoding options (only used when process=True)
        on_progress: Transcode progress callback (0-100)
    """
    config = config or RayBanConfig()
    final_path = (
        Path(output_path)
        if output_path
        else generate_output_path(
            input_path, config.front_camera, PROCESSED_SUFFIX if process else None
        )
    )
    temp_path: Path | None = None
    written: Path | None = None

    try:
        _validate_input(input_path)
        metadata = resolve(config)

        source = Path(input_path)
        if process:
            temp_path = generate_temp_path(input_path, PROCESSED_SUFFIX)
            ffmpeg.transcode(input_path, temp_path, options, config, on_progress)
            source = temp_path

        if source.resolve() != final_path.resolve():
            shutil.copyfile(source, final_path)
        written = final_path

        write_metadata(final_path, metadata)
    except (RayBanError, OSError) as e:
        logger.error(f"Error processing {input_path}: {e}")
        return _failure(e, written)
    finally:
        if temp_path is not None:
            _remove_temp_file(temp_path)

    logger.info(f"Stamped {input_path} -> {final_path}")
    return ProcessResult(success=True, output_path=str(final_path))


def process_and_add_metadata(
    input_path: str | Path,
    output_path: str | Path | None = None,
    config: RayBanConfig | None = None,
    options: ProcessingOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Transcode and stamp a video (add_metadata with process=True)."""
    return add_metadata(input_path, output_path, config, True, options, on_progress)


def transcode_video(
    input_path: str | Path,
    output_path: str | Path,
    options: ProcessingOptions | None = None,
    config: RayBanConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Transcode with the device profile without writing any tags."""
    try:
        _validate_input(input_path)
        ffmpeg.transcode(input_path, output_path, options, config, on_progress)
    except (RayBanError, OSError) as e:
        logger.error(f"Error transcoding {input_path}: {e}")
        return _failure(e)

    return ProcessResult(success=True, output_path=str(output_path))


def optimize_video(
    input_path: str | Path,
    output_path: str | Path | None = None,
    config: RayBanConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Optimize (high quality, stabilized) and stamp a video."""
    config = config or RayBanConfig()
    final_path = (
        Path(output_path)
        if output_path
        else generate_output_path(input_path, config.front_camera, OPTIMIZED_SUFFIX)
    )
    written: Path | None = None

    try:
        _validate_input(input_path)
        ffmpeg.optimize(input_path, final_path, config, on_progress)
        written = final_path
        write_metadata(final_path, resolve(config))
    except (RayBanError, OSError) as e:
        logger.error(f"Error optimizing {input_path}: {e}")
        return _failure(e, written)

    logger.info(f"Optimized {input_path} -> {final_path}")
    return ProcessResult(success=True, output_path=str(final_path))


def merge_videos(
    input_paths: Sequence[str | Path],
    output_path: str | Path,
    config: RayBanConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ProcessResult:
    """Concatenate videos and stamp the result.

    The comment records how many clips were merged.

    Raises:
        InsufficientInputsError: If fewer than 2 inputs are given
    """
    if len(input_paths) < 2:
        raise InsufficientInputsError(len(input_paths))

    try:
        for path in input_paths:
            _validate_input(path)
        ffmpeg.merge_videos(input_paths, output_path, on_progress)

        metadata = resolve(config)
        comment = f"{metadata.comment} - Merged from {len(input_paths)} clips"
        write_metadata(output_path, metadata, comment=comment)
    except (RayBanError, OSError) as e:
        logger.error(f"Error merging videos: {e}")
        return _failure(e)

    logger.info(f"Merged {len(input_paths)} videos -> {output_path}")
    return ProcessResult(success=True, output_path=str(output_path))


def create_thumbnail(
    input_path: str | Path,
    output_path: str | Path | None = None,
    timestamp: str = "00:00:01",
    size: str = "320x240",
) -> ProcessResult:
    """Write a thumbnail image (default: <stem>_thumb.jpg beside the input)."""
    path = Path(input_path)
    final_path = Path(output_path) if output_path else path.with_name(f"{path.stem}_thumb.jpg")

    try:
        ffmpeg.create_thumbnail(input_path, final_path, timestamp, size)
    except (RayBanError, OSError) as e:
        logger.error(f"Error creating thumbnail for {input_path}: {e}")
        return _failure(e)

    return ProcessResult(success=True, output_path=str(final_path))


def extract_frames(
    input_path: str | Path,
    output_dir: str | Path | None = None,
    interval: float = 1,
    fmt: str = "jpg",
) -> FramesResult:
    """Extract frames (default directory: <stem>_frames beside the input)."""
    path = Path(input_path)
    frames_dir = Path(output_dir) if output_dir else path.with_name(f"{path.stem}_frames")

    try:
        frames = ffmpeg.extract_frames(input_path, frames_dir, interval, fmt)
    except (RayBanError, OSError, ValueError) as e:
        logger.error(f"Error extracting frames from {input_path}: {e}")
        return FramesResult(success=False, error=str(e), error_type=type(e).__name__)

    return FramesResult(success=True, output_path=str(frames_dir), frames=frames)


def add_audio_track(
    video_path: str | Path,
    audio_path: str | Path,
    output_path: str | Path,
    replace: bool = False,
) -> ProcessResult:
    """Replace or mix in an audio track."""
    try:
        ffmpeg.add_audio(video_path, audio_path, output_path, replace)
    except (RayBanError, OSError) as e:
        logger.error(f"Error adding audio to {video_path}: {e}")
        return _failure(e)

    return ProcessResult(success=True, output_path=str(output_path))


# =============================================================================
# Batch
# =============================================================================


def batch_process(
    directory: str | Path,
    output_dir: str | Path | None = None,
    config: RayBanConfig | None = None,
    process: bool = False,
    options: ProcessingOptions | None = None,
) -> BatchResult:
    """Stamp every video directly inside a directory, one at a time.

    With output_dir, each file is written as rayban_<name> there (the
    directory is created). Otherwise default output names are used.

    Raises:
        NotADirectoryError: If the directory does not exist
    """
    video_files = get_video_files(directory)
    results = BatchResult(total=len(video_files))
    logger.info(f"Batch processing {results.total} videos in {directory}")

    out_dir = Path(output_dir) if output_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    for video_file in video_files:
        output_path = out_dir / f"{BATCH_PREFIX}{video_file.name}" if out_dir else None
        try:
            file_result = add_metadata(video_file.path, output_path, config, process, options)
        except Exception as e:
            logger.exception(f"Unexpected error processing {video_file.name}")
            file_result = _failure(e)

        results.results[video_file.name] = file_result
        if file_result.success:
            results.success += 1
            logger.info(f"Processed: {video_file.name}")
        else:
            results.failed += 1
            logger.warning(f"Failed: {video_file.name}: {file_result.error}")

    logger.info(
        f"Batch complete: {results.success} succeeded, {results.failed} failed, "
        f"{results.total} total"
    )
    return results


# =============================================================================
# Analysis
# =============================================================================


def analyze_video(file_path: str | Path) -> VideoAnalysis:
    """Probe a video and rate how well it suits the glasses' format.

    Raises:
        UnsupportedFileType: If the extension is not a video type
        ReadError: If the file cannot be probed
    """
    if not is_video_file(file_path):
        raise UnsupportedFileType(str(file_path))

    info = ffmpeg.get_video_info(file_path)
    recommendations: list[str] = []
    compatibility = Compatibility.EXCELLENT

    if info.width < MIN_WIDTH or info.height < MIN_HEIGHT:
        recommendations.append(
            "Consider upscaling to at least 720p for better Ray-Ban compatibility"
        )
        compatibility = Compatibility.POOR

    if info.fps < MIN_FPS:
        recommendations.append("Frame rate below 24fps may result in choppy playback")
        if compatibility == Compatibility.EXCELLENT:
            compatibility = Compatibility.FAIR

    if info.bitrate < MIN_BITRATE:
        recommendations.append("Low bitrate detected, consider increasing quality")
        if compatibility == Compatibility.EXCELLENT:
            compatibility = Compatibility.GOOD

    # Square (Stories) and 16:9 (Meta) are the native shapes
    if info.width != info.height and info.width * 9 != info.height * 16:
        recommendations.append(
            "Consider cropping to 1:1 aspect ratio for Ray-Ban Stories compatibility"
        )

    return VideoAnalysis(info=info, recommendations=recommendations, compatibility=compatibility)
