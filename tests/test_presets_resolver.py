"""Tests for the preset table and metadata resolver."""

from datetime import datetime

import pytest

from rayban_meta.metadata import (
    format_timestamp,
    generate_summary,
    resolve,
    to_exif_args,
    writable_tags,
)
from rayban_meta.metadata.generator import DATE_FORMAT, WRITABLE_TAGS
from rayban_meta.presets import (
    DEFAULT_LOCATION_FRONT,
    DEFAULT_LOCATION_MAIN,
    FRONT_CAMERA,
    MAIN_CAMERA,
    get_presets,
)
from rayban_meta.schemas import CameraType, QualityTier, RayBanConfig

LOCATION_NAMES = ["new-york", "san-francisco", "london", "tokyo", "paris", "default"]


class TestPresetTable:
    def test_table_is_shared(self):
        assert get_presets() is get_presets()

    def test_presets_are_frozen(self):
        with pytest.raises(Exception):
            FRONT_CAMERA.model = "Other"  # type: ignore[misc]

    def test_camera_lookup(self):
        presets = get_presets()
        assert presets.camera(CameraType.FRONT) == FRONT_CAMERA
        assert presets.camera(CameraType.MAIN) == MAIN_CAMERA

    def test_location_names(self):
        assert get_presets().location_names() == LOCATION_NAMES

    def test_device_profiles(self):
        profiles = get_presets().device_profiles
        assert profiles[CameraType.FRONT].name == "stories"
        assert profiles[CameraType.FRONT].resolution == "1184x1184"
        assert profiles[CameraType.MAIN].name == "meta"
        assert profiles[CameraType.MAIN].fps == 60

    def test_quality_tiers(self):
        quality = get_presets().quality
        assert [quality[tier].crf for tier in QualityTier] == [28, 23, 18, 15]
        assert quality[QualityTier.ULTRA].preset == "veryslow"


class TestResolveLocation:
    @pytest.mark.parametrize(
        "front_camera,expected",
        [(True, DEFAULT_LOCATION_FRONT), (False, DEFAULT_LOCATION_MAIN)],
    )
    def test_camera_default_city(self, front_camera, expected):
        metadata = resolve(RayBanConfig(front_camera=front_camera))
        location = get_presets().locations[expected]

        assert metadata.gps_latitude == location.latitude
        assert metadata.gps_longitude == location.longitude
        assert metadata.gps_altitude == location.altitude

    @pytest.mark.parametrize("front_camera", [True, False])
    @pytest.mark.parametrize("name", LOCATION_NAMES)
    def test_named_location(self, name, front_camera):
        metadata = resolve(RayBanConfig(front_camera=front_camera, location_name=name))
        location = get_presets().locations[name]

        assert (metadata.gps_latitude, metadata.gps_longitude, metadata.gps_altitude) == (
            location.latitude,
            location.longitude,
            location.altitude,
        )

    def test_unknown_location_falls_back(self):
        metadata = resolve(RayBanConfig(front_camera=True, location_name="atlantis"))
        assert metadata.gps_latitude == get_presets().locations[DEFAULT_LOCATION_FRONT].latitude

    @pytest.mark.parametrize("front_camera", [True, False])
    def test_explicit_coordinates_default_altitude(self, front_camera):
        metadata = resolve(
            RayBanConfig(front_camera=front_camera, latitude="1.5", longitude="-2.25")
        )
        assert metadata.gps_latitude == "1.5"
        assert metadata.gps_longitude == "-2.25"
        assert metadata.gps_altitude == "5"

    def test_explicit_coordinates_override_name(self):
        metadata = resolve(
            RayBanConfig(location_name="tokyo", latitude="10", longitude="20", altitude="300")
        )
        assert (metadata.gps_latitude, metadata.gps_longitude, metadata.gps_altitude) == (
            "10",
            "20",
            "300",
        )

    def test_latitude_alone_is_ignored(self):
        metadata = resolve(RayBanConfig(location_name="paris", latitude="10"))
        assert metadata.gps_latitude == "48.8566"


class TestHemisphere:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("tokyo", ("N", "E")),
            ("paris", ("N", "E")),
            ("london", ("N", "W")),
            ("new-york", ("N", "W")),
        ],
    )
    def test_named_location_refs(self, name, expected):
        tags = writable_tags(resolve(RayBanConfig(location_name=name)))
        assert (tags["GPSLatitudeRef"], tags["GPSLongitudeRef"]) == expected

    def test_southern_eastern_coordinates(self):
        metadata = resolve(RayBanConfig(latitude="-33.8688", longitude="151.2093"))

        assert metadata.gps_latitude == "-33.8688"
        assert (metadata.gps_latitude_ref, metadata.gps_longitude_ref) == ("S", "E")

    def test_refs_do_not_depend_on_camera(self):
        front = resolve(RayBanConfig(front_camera=True, location_name="tokyo"))
        main = resolve(RayBanConfig(location_name="tokyo"))
        assert front.gps_longitude_ref == main.gps_longitude_ref == "E"

    def test_non_numeric_coordinates(self):
        metadata = resolve(RayBanConfig(latitude="north", longitude="-"))
        assert (metadata.gps_latitude_ref, metadata.gps_longitude_ref) == ("N", "E")


class TestResolveRecord:
    def test_front_camera_tokyo_muted(self):
        metadata = resolve(
            RayBanConfig(front_camera=True, has_audio=False, location_name="tokyo")
        )

        assert metadata.audio_channels == 0
        assert metadata.microphone == "None"
        assert metadata.gps_latitude == "35.6762"
        assert metadata.gps_longitude == "139.6503"
        assert metadata.gps_altitude == "20"
        assert metadata.make == "Meta"
        assert metadata.model == "Ray-Ban Stories"

    @pytest.mark.parametrize("front_camera", [True, False])
    def test_audio_disabled(self, front_camera):
        metadata = resolve(
            RayBanConfig(
                front_camera=front_camera,
                has_audio=False,
                custom_comment="quiet",
                location_name="london",
            )
        )
        assert metadata.audio_channels == 0
        assert metadata.microphone == "None"

    def test_audio_enabled_uses_preset(self):
        assert resolve(RayBanConfig(front_camera=True)).audio_channels == 2
        assert resolve(RayBanConfig()).audio_channels == 4
        assert resolve(RayBanConfig()).microphone == MAIN_CAMERA.microphone

    def test_default_config_is_main_camera(self):
        metadata = resolve()
        assert metadata.model == "Ray-Ban Meta"
        assert metadata.comment == MAIN_CAMERA.default_comment

    def test_custom_comment(self):
        assert resolve(RayBanConfig(custom_comment="Beach day")).comment == "Beach day"

    def test_custom_date_used_verbatim(self):
        metadata = resolve(RayBanConfig(custom_date="2023:07:04 12:30:00"))
        assert metadata.create_date == "2023:07:04 12:30:00"
        assert metadata.modify_date == metadata.create_date

    def test_timestamp_within_call_window(self):
        before = datetime.now().replace(microsecond=0)
        metadata = resolve(RayBanConfig())
        after = datetime.now()

        stamped = datetime.strptime(metadata.create_date, DATE_FORMAT)
        assert before <= stamped <= after
        assert metadata.modify_date == metadata.create_date

    def test_resolve_is_idempotent(self):
        config = RayBanConfig(front_camera=True, custom_date="2024:01:01 00:00:00")
        assert resolve(config) == resolve(config)

    def test_record_is_frozen(self):
        metadata = resolve()
        with pytest.raises(Exception):
            metadata.make = "Other"  # type: ignore[misc]

    def test_format_timestamp(self):
        assert format_timestamp(datetime(2024, 3, 9, 7, 5, 1)) == "2024:03:09 07:05:01"


class TestTagSerialization:
    def test_writable_tags(self):
        metadata = resolve(RayBanConfig(custom_date="2024:01:01 00:00:00"))
        tags = writable_tags(metadata)

        assert list(tags) == list(WRITABLE_TAGS)
        assert tags["Make"] == "Meta"
        assert tags["CreateDate"] == "2024:01:01 00:00:00"
        assert tags["GPSLongitudeRef"] == "W"

    def test_writable_tags_comment_override(self):
        tags = writable_tags(resolve(), comment="Merged")
        assert tags["Comment"] == "Merged"

    def test_to_exif_args_skips_none(self):
        args = to_exif_args({"Make": "Meta", "Model": None, "GPSAltitude": 5})
        assert args == ["-Make=Meta", "-GPSAltitude=5"]

    def test_summary(self):
        summary = generate_summary(resolve(RayBanConfig(front_camera=True, has_audio=False)))

        assert "Device: Meta Ray-Ban Stories" in summary
        assert "Audio: 0 channels (None)" in summary
        assert summary.splitlines()[-1].startswith("Note: ")
