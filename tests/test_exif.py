"""Tests for the exiftool adapter."""

import pytest

from rayban_meta.errors import ExternalToolFailure, ExternalToolUnavailable, ReadError
from rayban_meta.metadata import (
    check_exiftool,
    get_exiftool_version,
    has_rayban_tags,
    read_metadata,
    resolve,
    verify_metadata,
    write_metadata,
)
from rayban_meta.schemas import RayBanConfig


@pytest.fixture
def video(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"video")
    return path


def test_write_metadata_args(fake_exiftool, video):
    metadata = resolve(RayBanConfig(custom_date="2024:05:01 10:00:00"))
    write_metadata(video, metadata)

    params = fake_exiftool.calls[-1]
    assert params[0] == "-Make=Meta"
    assert "-Model=Ray-Ban Meta" in params
    assert "-CreateDate=2024:05:01 10:00:00" in params
    assert params[-2:] == ("-overwrite_original", str(video))


def test_write_then_verify(fake_exiftool, video):
    write_metadata(video, resolve(RayBanConfig(front_camera=True)))

    assert verify_metadata(video) is True
    assert read_metadata(video)["Model"] == "Ray-Ban Stories"


def test_write_comment_override(fake_exiftool, video):
    write_metadata(video, resolve(), comment="Merged from 3 clips")
    assert read_metadata(video)["Comment"] == "Merged from 3 clips"


def test_write_failure(fake_exiftool, video):
    fake_exiftool.fail_write = True

    with pytest.raises(ExternalToolFailure) as exc_info:
        write_metadata(video, resolve())
    assert exc_info.value.tool == "exiftool"


def test_write_tool_unavailable(fake_exiftool, video):
    fake_exiftool.unavailable = True

    with pytest.raises(ExternalToolUnavailable):
        write_metadata(video, resolve())


def test_read_missing_file(fake_exiftool, tmp_path):
    with pytest.raises(ReadError):
        read_metadata(tmp_path / "missing.mp4")


def test_verify_untagged_file(fake_exiftool, video):
    assert verify_metadata(video) is False


def test_verify_missing_file(fake_exiftool, tmp_path):
    assert verify_metadata(tmp_path / "missing.mp4") is False


def test_verify_tool_unavailable(fake_exiftool, video):
    fake_exiftool.unavailable = True
    assert verify_metadata(video) is False


@pytest.mark.parametrize(
    "tags,expected",
    [
        (
            {
                "Make": "Meta",
                "Model": "Ray-Ban Meta",
                "Software": "Meta Camera v3.0.1",
                "LensModel": "Ray-Ban Stories Wide Angle 12mm f/1.8",
            },
            True,
        ),
        # One required tag missing
        ({"Make": "Meta", "Model": "Ray-Ban Meta", "Software": "Meta Camera"}, False),
        # Present but without a brand marker
        (
            {"Make": "Meta", "Model": "Ray-Ban Meta", "Software": "Meta Camera", "LensModel": "Zeiss"},
            False,
        ),
        ({"Make": "Apple", "Model": "iPhone 15", "Software": "17.0", "LensModel": "iPhone"}, False),
        ({}, False),
    ],
)
def test_has_rayban_tags(tags, expected):
    assert has_rayban_tags(tags) is expected


def test_exiftool_version(fake_exiftool):
    assert get_exiftool_version() == "12.76"
    assert check_exiftool() is True


def test_exiftool_missing(fake_exiftool):
    fake_exiftool.unavailable = True

    assert get_exiftool_version() is None
    assert check_exiftool() is False
