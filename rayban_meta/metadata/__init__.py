"""Metadata resolution and tag writing.

Usage:
    from rayban_meta.metadata import resolve, write_metadata

    metadata = resolve(RayBanConfig(front_camera=True, location_name="tokyo"))
    write_metadata("/path/to/video.mp4", metadata)
"""

from .exif import (
    check_exiftool,
    get_exiftool_version,
    has_rayban_tags,
    read_metadata,
    verify_metadata,
    write_metadata,
)
from .generator import (
    DATE_FORMAT,
    format_timestamp,
    generate_summary,
    resolve,
    to_exif_args,
    writable_tags,
)

__all__ = [
    "DATE_FORMAT",
    "check_exiftool",
    "format_timestamp",
    "generate_summary",
    "get_exiftool_version",
    "has_rayban_tags",
    "read_metadata",
    "resolve",
    "to_exif_args",
    "verify_metadata",
    "writable_tags",
    "write_metadata",
]
