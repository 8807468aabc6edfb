"""Static preset tables for the glasses' cameras, locations and encoder tiers.

The table is built once per process and never mutated. Pass it to the
resolver explicitly, or let callers fall back to get_presets().
"""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from rayban_meta.schemas import (
    CameraPreset,
    CameraType,
    DeviceProfile,
    LocationPreset,
    QualitySettings,
    QualityTier,
)

# =============================================================================
# Camera presets
# =============================================================================

FRONT_CAMERA = CameraPreset(
    make="Meta",
    model="Ray-Ban Stories",
    software="Meta Camera v2.1.4",
    lens_model="Ray-Ban Stories Front Camera 5.5mm f/2.0",
    camera_model_name="Meta Ray-Ban Stories",
    device_type="Smart Glasses",
    capture_mode="Video",
    audio_channels=2,
    microphone="Beamforming Array",
    field_of_view="87°",
    image_stabilization="Electronic",
    default_comment="Recorded on Meta Ray-Ban Smart Glasses - First-person perspective",
)

MAIN_CAMERA = CameraPreset(
    make="Meta",
    model="Ray-Ban Meta",
    software="Meta Camera v3.0.1",
    lens_model="Ray-Ban Stories Wide Angle 12mm f/1.8",
    camera_model_name="Meta Ray-Ban",
    device_type="Smart Glasses Camera",
    capture_mode="Hands-free Video",
    audio_channels=4,
    microphone="5-microphone array with noise cancellation",
    field_of_view="120° ultra-wide",
    image_stabilization="Optical + Electronic",
    default_comment="Captured with Meta Ray-Ban Smart Glasses - Hands-free recording",
)

# =============================================================================
# Locations
# =============================================================================

LOCATIONS: dict[str, LocationPreset] = {
    "new-york": LocationPreset(latitude="40.7128", longitude="-74.0060", altitude="10"),
    "san-francisco": LocationPreset(latitude="37.7749", longitude="-122.4194", altitude="5"),
    "london": LocationPreset(latitude="51.5074", longitude="-0.1278", altitude="15"),
    "tokyo": LocationPreset(latitude="35.6762", longitude="139.6503", altitude="20"),
    "paris": LocationPreset(latitude="48.8566", longitude="2.3522", altitude="35"),
    "default": LocationPreset(latitude="37.7749", longitude="-122.4194", altitude="5"),
}

# Fallback location per camera when nothing else is given
DEFAULT_LOCATION_FRONT = "new-york"
DEFAULT_LOCATION_MAIN = "san-francisco"

# Altitude used when explicit coordinates come without one
DEFAULT_ALTITUDE = "5"

# =============================================================================
# Transcoder defaults
# =============================================================================

DEVICE_PROFILES: dict[CameraType, DeviceProfile] = {
    CameraType.FRONT: DeviceProfile(name="stories", resolution="1184x1184", fps=30, bitrate="4000k"),
    CameraType.MAIN: DeviceProfile(name="meta", resolution="1920x1080", fps=60, bitrate="8000k"),
}

QUALITY_PRESETS: dict[QualityTier, QualitySettings] = {
    QualityTier.LOW: QualitySettings(crf=28, preset="fast"),
    QualityTier.MEDIUM: QualitySettings(crf=23, preset="medium"),
    QualityTier.HIGH: QualitySettings(crf=18, preset="slow"),
    QualityTier.ULTRA: QualitySettings(crf=15, preset="veryslow"),
}


class PresetTable(BaseModel):
    """Immutable bundle of every preset the resolver and transcoder read."""

    model_config = ConfigDict(frozen=True)

    front_camera: CameraPreset
    main_camera: CameraPreset
    locations: dict[str, LocationPreset]
    device_profiles: dict[CameraType, DeviceProfile]
    quality: dict[QualityTier, QualitySettings]

    def camera(self, camera_type: CameraType) -> CameraPreset:
        """Get the camera preset for a camera type."""
        return self.front_camera if camera_type == CameraType.FRONT else self.main_camera

    def default_location(self, camera_type: CameraType) -> LocationPreset:
        """Get the fallback location for a camera type."""
        name = DEFAULT_LOCATION_FRONT if camera_type == CameraType.FRONT else DEFAULT_LOCATION_MAIN
        return self.locations[name]

    def location_names(self) -> list[str]:
        return list(self.locations.keys())


@lru_cache(maxsize=1)
def get_presets() -> PresetTable:
    """Get the process-wide preset table (built on first call)."""
    return PresetTable(
        front_camera=FRONT_CAMERA,
        main_camera=MAIN_CAMERA,
        locations=dict(LOCATIONS),
        device_profiles=dict(DEVICE_PROFILES),
        quality=dict(QUALITY_PRESETS),
    )
