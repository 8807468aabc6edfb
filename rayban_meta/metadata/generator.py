"""Resolve a RayBanConfig into the full set of tags to stamp.

Precedence for GPS position (highest wins):
1. Explicit latitude + longitude (altitude defaults to 5)
2. A known location preset name
3. The camera type's default city

Everything else comes straight from the camera preset, except the comment
(replaced by custom_comment), the dates (custom_date or now) and the audio
fields (zeroed when audio is off). The hemisphere letters follow the sign
of the resolved coordinates.
"""

import logging
from datetime import datetime
from typing import Any

from rayban_meta.presets import DEFAULT_ALTITUDE, PresetTable, get_presets
from rayban_meta.schemas import LocationPreset, RayBanConfig, RayBanMetadata

logger = logging.getLogger(__name__)

# EXIF date format
DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

NO_MICROPHONE = "None"

# Order matters: this is the order tags are passed to exiftool
WRITABLE_TAGS: dict[str, str] = {
    "Make": "make",
    "Model": "model",
    "Software": "software",
    "LensModel": "lens_model",
    "CreateDate": "create_date",
    "ModifyDate": "modify_date",
    "Comment": "comment",
    "GPSLatitude": "gps_latitude",
    "GPSLongitude": "gps_longitude",
    "GPSAltitude": "gps_altitude",
    "GPSLatitudeRef": "gps_latitude_ref",
    "GPSLongitudeRef": "gps_longitude_ref",
}


def format_timestamp(moment: datetime | None = None) -> str:
    """Format a datetime (default: now) as an EXIF timestamp."""
    return (moment or datetime.now()).strftime(DATE_FORMAT)


def hemisphere(value: str, positive: str, negative: str) -> str:
    """Reference letter for a decimal coordinate string.

    Non-numeric values get the positive letter.
    """
    try:
        return negative if float(value) < 0 else positive
    except ValueError:
        return positive


def resolve_location(config: RayBanConfig, presets: PresetTable) -> LocationPreset:
    """Pick the GPS position for a config."""
    if config.latitude and config.longitude:
        return LocationPreset(
            latitude=config.latitude,
            longitude=config.longitude,
            altitude=config.altitude or DEFAULT_ALTITUDE,
        )

    if config.location_name and config.location_name in presets.locations:
        return presets.locations[config.location_name]

    if config.location_name:
        logger.debug(f"Unknown location '{config.location_name}', using camera default")

    return presets.default_location(config.camera_type)


def resolve(
    config: RayBanConfig | None = None,
    presets: PresetTable | None = None,
) -> RayBanMetadata:
    """Build the metadata record for a config.

    Never raises: unknown inputs fall back to preset defaults.

    Args:
        config: Caller's request (defaults: main camera, audio on)
        presets: Preset table (defaults to the process-wide table)

    Returns:
        Frozen RayBanMetadata with create_date == modify_date
    """
    config = config or RayBanConfig()
    presets = presets or get_presets()

    camera = presets.camera(config.camera_type)
    location = resolve_location(config, presets)
    date = config.custom_date or format_timestamp()

    return RayBanMetadata(
        make=camera.make,
        model=camera.model,
        software=camera.software,
        lens_model=camera.lens_model,
        create_date=date,
        modify_date=date,
        camera_model_name=camera.camera_model_name,
        device_type=camera.device_type,
        capture_mode=camera.capture_mode,
        audio_channels=camera.audio_channels if config.has_audio else 0,
        microphone=camera.microphone if config.has_audio else NO_MICROPHONE,
        field_of_view=camera.field_of_view,
        image_stabilization=camera.image_stabilization,
        comment=config.custom_comment or camera.default_comment,
        gps_latitude=location.latitude,
        gps_longitude=location.longitude,
        gps_altitude=location.altitude,
        gps_latitude_ref=hemisphere(location.latitude, "N", "S"),
        gps_longitude_ref=hemisphere(location.longitude, "E", "W"),
    )


def writable_tags(metadata: RayBanMetadata, comment: str | None = None) -> dict[str, str]:
    """Get the tag set that is actually written to a file.

    Args:
        metadata: Resolved metadata record
        comment: Replaces the record's comment (used when merging clips)
    """
    tags = {tag: str(getattr(metadata, field)) for tag, field in WRITABLE_TAGS.items()}
    if comment is not None:
        tags["Comment"] = comment
    return tags


def to_exif_args(tags: dict[str, Any]) -> list[str]:
    """Convert a tag mapping to exiftool `-Tag=value` arguments.

    None values are skipped.
    """
    return [f"-{tag}={value}" for tag, value in tags.items() if value is not None]


def generate_summary(metadata: RayBanMetadata) -> str:
    """Human-readable summary of a metadata record."""
    lines = [
        f"Device: {metadata.make} {metadata.model}",
        f"Lens: {metadata.lens_model}",
        f"Mode: {metadata.capture_mode}",
        f"Audio: {metadata.audio_channels} channels ({metadata.microphone})",
        f"FOV: {metadata.field_of_view}",
        f"Location: {metadata.gps_latitude}, {metadata.gps_longitude}",
        f"Date: {metadata.create_date}",
        f"Note: {metadata.comment}",
    ]
    return "\n".join(lines)
