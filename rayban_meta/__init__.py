"""Ray-Ban Meta metadata tool - stamp smart-glasses metadata onto videos."""

try:
    from rayban_meta._version import __version__
except ImportError:
    # Not installed, running from source without build
    __version__ = "0.0.0.dev0"

# ruff: noqa: E402 (version must be set before submodules import it)
from rayban_meta.metadata import generate_summary, resolve
from rayban_meta.presets import get_presets
from rayban_meta.processor import (
    add_audio_track,
    add_metadata,
    analyze_video,
    batch_process,
    check_exiftool,
    check_ffmpeg,
    create_thumbnail,
    extract_frames,
    get_ffmpeg_capabilities,
    get_video_files,
    get_video_info,
    merge_videos,
    optimize_video,
    process_and_add_metadata,
    transcode_video,
    verify_metadata,
)
from rayban_meta.schemas import ProcessingOptions, RayBanConfig, RayBanMetadata

__all__ = [
    "ProcessingOptions",
    "RayBanConfig",
    "RayBanMetadata",
    "__version__",
    "add_audio_track",
    "add_metadata",
    "analyze_video",
    "batch_process",
    "check_exiftool",
    "check_ffmpeg",
    "create_thumbnail",
    "extract_frames",
    "generate_summary",
    "get_ffmpeg_capabilities",
    "get_presets",
    "get_video_files",
    "get_video_info",
    "merge_videos",
    "optimize_video",
    "process_and_add_metadata",
    "resolve",
    "transcode_video",
    "verify_metadata",
]
