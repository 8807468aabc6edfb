"""Read, write and verify tags with ExifTool (via pyexiftool).

Every call starts its own exiftool process and terminates it afterwards,
so nothing is shared between files in a batch.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import exiftool
from exiftool.exceptions import ExifToolException, ExifToolExecuteError

from rayban_meta.config import get_settings
from rayban_meta.errors import ExternalToolFailure, ExternalToolUnavailable, ReadError
from rayban_meta.metadata.generator import to_exif_args, writable_tags
from rayban_meta.schemas import RayBanMetadata

logger = logging.getLogger(__name__)

TOOL_NAME = "exiftool"

# Tags that must carry a brand marker for a file to count as stamped
REQUIRED_TAGS = ("Make", "Model", "Software", "LensModel")
BRAND_MARKERS = ("Ray-Ban", "Meta")


@contextmanager
def open_exiftool() -> Iterator[exiftool.ExifToolHelper]:
    """Start an exiftool process for the duration of a with-block.

    Tags are returned ungrouped (no -G) and with print conversion, so keys
    are plain tag names like "Make".

    Raises:
        ExternalToolUnavailable: If the exiftool binary cannot be started
    """
    settings = get_settings()
    try:
        et = exiftool.ExifToolHelper(executable=settings.exiftool_path, common_args=[])
        et.run()
    except OSError as e:
        logger.error(f"Cannot start exiftool ({settings.exiftool_path}): {e}")
        raise ExternalToolUnavailable(TOOL_NAME) from e

    try:
        yield et
    finally:
        et.terminate()


def _failure_message(error: ExifToolException) -> str:
    stderr = getattr(error, "stderr", None)
    if stderr:
        return str(stderr).strip()
    return str(error)


def write_metadata(
    file_path: str | Path,
    metadata: RayBanMetadata,
    comment: str | None = None,
) -> None:
    """Write the stamp tags to a file in place.

    No rollback: if exiftool fails part-way the file may hold some tags.

    Args:
        file_path: File to modify
        metadata: Resolved metadata record
        comment: Optional replacement for the record's comment

    Raises:
        ExternalToolUnavailable: If exiftool cannot be started
        ExternalToolFailure: If exiftool reports an error
    """
    tags = writable_tags(metadata, comment=comment)
    args = to_exif_args(tags)
    logger.debug(f"exiftool write {file_path}: {args}")

    try:
        with open_exiftool() as et:
            et.execute(*args, "-overwrite_original", str(file_path))
    except ExifToolExecuteError as e:
        message = _failure_message(e)
        logger.error(f"exiftool failed to write {file_path}: {message}")
        raise ExternalToolFailure(TOOL_NAME, message) from e
    except ExifToolException as e:
        raise ExternalToolFailure(TOOL_NAME, str(e)) from e

    logger.info(f"Wrote {len(tags)} tags to {file_path}")


def read_metadata(file_path: str | Path) -> dict[str, Any]:
    """Read all tags from a file.

    Raises:
        ReadError: If the file is missing or exiftool cannot read it
        ExternalToolUnavailable: If exiftool cannot be started
    """
    path = Path(file_path)
    if not path.is_file():
        raise ReadError(str(file_path), "file not found")

    try:
        with open_exiftool() as et:
            results = et.get_metadata(str(path))
    except ExifToolException as e:
        raise ReadError(str(file_path), _failure_message(e)) from e

    if not results:
        raise ReadError(str(file_path), "exiftool returned no metadata")

    return results[0]


def has_rayban_tags(tags: dict[str, Any]) -> bool:
    """Check that every required tag is present and carries a brand marker."""
    for tag in REQUIRED_TAGS:
        value = tags.get(tag)
        if not value:
            return False
        if not any(marker in str(value) for marker in BRAND_MARKERS):
            return False
    return True


def verify_metadata(file_path: str | Path) -> bool:
    """Check whether a file carries the stamp tags.

    Any read problem counts as "not stamped".
    """
    try:
        tags = read_metadata(file_path)
    except (ReadError, ExternalToolUnavailable) as e:
        logger.warning(f"Verification could not read {file_path}: {e}")
        return False

    return has_rayban_tags(tags)


def get_exiftool_version() -> str | None:
    """Get the exiftool version, or None if it cannot be started."""
    try:
        with open_exiftool() as et:
            return str(et.version)
    except (ExternalToolUnavailable, ExifToolException) as e:
        logger.debug(f"exiftool version check failed: {e}")
        return None


def check_exiftool() -> bool:
    """Check if exiftool is available."""
    return get_exiftool_version() is not None
