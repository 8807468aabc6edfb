"""FFmpeg/ffprobe adapter.

Usage:
    from rayban_meta.ffmpeg import transcode, get_video_info

    info = get_video_info("/path/to/video.mp4")
    transcode("/path/to/video.mp4", "/path/to/out.mp4", on_progress=print)
"""

from .probe import get_duration, get_video_info, parse_fps, run_ffprobe, time_to_seconds
from .processor import (
    ProgressCallback,
    add_audio,
    build_merge_command,
    build_transcode_command,
    check_ffmpeg,
    create_thumbnail,
    extract_frames,
    get_capabilities,
    merge_videos,
    optimize,
    run_ffmpeg,
    transcode,
)

__all__ = [
    "ProgressCallback",
    "add_audio",
    "build_merge_command",
    "build_transcode_command",
    "check_ffmpeg",
    "create_thumbnail",
    "extract_frames",
    "get_capabilities",
    "get_duration",
    "get_video_info",
    "merge_videos",
    "optimize",
    "parse_fps",
    "run_ffmpeg",
    "run_ffprobe",
    "time_to_seconds",
    "transcode",
]
