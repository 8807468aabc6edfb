"""Command-line interface for rayban-meta.

Every subcommand returns an exit status: 0 on success, 1 on any failure.
Errors are printed to stderr as "Error: <message>".
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import uvicorn

from rayban_meta import __version__, processor
from rayban_meta.config import get_settings
from rayban_meta.errors import RayBanError
from rayban_meta.metadata import generate_summary, get_exiftool_version, resolve
from rayban_meta.presets import DEFAULT_LOCATION_FRONT, DEFAULT_LOCATION_MAIN, get_presets
from rayban_meta.schemas import (
    BatchResult,
    CameraType,
    ProcessingOptions,
    ProcessResult,
    QualityTier,
    RayBanConfig,
)
from rayban_meta.utils.logging import setup_logging

logger = logging.getLogger(__name__)

CUSTOM_LOCATION = "custom"


# =============================================================================
# Output helpers
# =============================================================================


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _print_progress(percent: float) -> None:
    sys.stdout.write(f"\rProgress: {percent:5.1f}%")
    if percent >= 100:
        sys.stdout.write("\n")
    sys.stdout.flush()


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, default=str))


def _report(result: ProcessResult, action: str) -> int:
    if not result.success:
        return _error(result.error or f"{action} failed")
    print(f"✓ {action}: {result.output_path}")
    return 0


def _print_batch(result: BatchResult) -> int:
    print(f"\nProcessed {result.total} videos")
    print(f"  Succeeded: {result.success}")
    print(f"  Failed: {result.failed}")
    for name, file_result in result.results.items():
        if not file_result.success:
            print(f"  ✗ {name}: {file_result.error}", file=sys.stderr)
    if result.failed:
        return _error(f"{result.failed} of {result.total} videos failed")
    return 0


# =============================================================================
# Argument helpers
# =============================================================================


def _config_from_args(args: argparse.Namespace) -> RayBanConfig:
    return RayBanConfig(
        front_camera=args.front,
        has_audio=not args.mute,
        custom_date=args.date,
        latitude=args.lat,
        longitude=args.lon,
        altitude=args.alt,
        location_name=args.location,
        custom_comment=args.comment,
    )


def _options_from_args(args: argparse.Namespace) -> ProcessingOptions:
    return ProcessingOptions(
        quality=args.quality or get_settings().default_quality,
        stabilize=args.stabilize,
        add_watermark=args.watermark,
    )


def _common_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return parent


def _metadata_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    group = parent.add_argument_group("metadata")
    group.add_argument("-f", "--front", action="store_true", help="Front camera (Ray-Ban Stories)")
    group.add_argument("-m", "--mute", action="store_true", help="Record without audio")
    group.add_argument("-d", "--date", help="Capture date (YYYY:MM:DD HH:MM:SS)")
    group.add_argument(
        "-l", "--location", help=f"Location preset ({', '.join(get_presets().location_names())})"
    )
    group.add_argument("--lat", help="GPS latitude")
    group.add_argument("--lon", help="GPS longitude")
    group.add_argument("--alt", help="GPS altitude in meters (default: 5)")
    group.add_argument("-c", "--comment", help="Custom comment")
    return parent


def _processing_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    group = parent.add_argument_group("processing")
    group.add_argument("--process", action="store_true", help="Transcode with ffmpeg first")
    group.add_argument(
        "--quality",
        choices=[tier.value for tier in QualityTier],
        help="Quality tier (default from settings)",
    )
    group.add_argument("--stabilize", action="store_true", help="Apply video stabilization")
    group.add_argument("--watermark", action="store_true", help="Overlay the device name")
    return parent


# =============================================================================
# Commands
# =============================================================================


def cmd_add(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    options = _options_from_args(args)

    print(generate_summary(resolve(config)))
    print()

    result = processor.add_metadata(
        args.input,
        args.output,
        config,
        process=args.process,
        options=options,
        on_progress=_print_progress if args.process else None,
    )
    return _report(result, "Metadata added")


def cmd_batch(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    options = _options_from_args(args)

    try:
        result = processor.batch_process(
            args.directory, args.output, config, process=args.process, options=options
        )
    except NotADirectoryError as e:
        return _error(str(e))

    return _print_batch(result)


def cmd_verify(args: argparse.Namespace) -> int:
    if processor.verify_metadata(args.input):
        print(f"✓ {args.input} contains Ray-Ban Meta metadata")
        return 0
    return _error(f"{args.input} does not contain Ray-Ban Meta metadata")


def cmd_presets(args: argparse.Namespace) -> int:
    presets = get_presets()

    if args.json:
        _print_json(presets.model_dump(mode="json"))
        return 0

    print("Cameras:")
    for camera_type in CameraType:
        camera = presets.camera(camera_type)
        profile = presets.device_profiles[camera_type]
        print(f"  {camera_type}: {camera.model} ({camera.lens_model})")
        print(f"    {profile.resolution} @ {profile.fps}fps, {profile.bitrate}")

    print("\nLocations:")
    for name, location in presets.locations.items():
        print(f"  {name}: {location.latitude}, {location.longitude} ({location.altitude}m)")

    print("\nQuality tiers:")
    for tier, quality in presets.quality.items():
        print(f"  {tier}: crf {quality.crf}, preset {quality.preset}")
    return 0


def cmd_optimize(args: argparse.Namespace) -> int:
    result = processor.optimize_video(
        args.input, args.output, _config_from_args(args), on_progress=_print_progress
    )
    return _report(result, "Optimized")


def cmd_analyze(args: argparse.Namespace) -> int:
    try:
        analysis = processor.analyze_video(args.input)
    except RayBanError as e:
        return _error(str(e))

    if args.json:
        _print_json(analysis.model_dump(mode="json"))
        return 0

    info = analysis.info
    print(f"File: {args.input}")
    print(f"Resolution: {info.width}x{info.height}")
    print(f"FPS: {info.fps:.2f}")
    print(f"Bitrate: {info.bitrate // 1000} kbps")
    print(f"Compatibility: {analysis.compatibility}")
    if analysis.recommendations:
        print("Recommendations:")
        for recommendation in analysis.recommendations:
            print(f"  - {recommendation}")
    return 0


def cmd_merge(args: argparse.Namespace) -> int:
    if not args.output:
        return _error("merge requires an output path (-o/--output)")

    try:
        result = processor.merge_videos(
            args.inputs, args.output, _config_from_args(args), on_progress=_print_progress
        )
    except RayBanError as e:
        return _error(str(e))

    return _report(result, "Merged")


def cmd_thumbnail(args: argparse.Namespace) -> int:
    result = processor.create_thumbnail(args.input, args.output, args.time, args.size)
    return _report(result, "Thumbnail created")


def cmd_frames(args: argparse.Namespace) -> int:
    result = processor.extract_frames(args.input, args.output, args.interval, args.format)
    if not result.success:
        return _error(result.error or "frame extraction failed")
    print(f"✓ Extracted {len(result.frames)} frames to {result.output_path}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    try:
        info = processor.get_video_info(args.input)
    except RayBanError as e:
        return _error(str(e))

    if args.json:
        _print_json(info.model_dump(mode="json"))
        return 0

    print(f"File: {args.input}")
    print(f"Duration: {info.duration:.2f}s")
    print(f"Resolution: {info.width}x{info.height}")
    print(f"FPS: {info.fps:.2f}")
    print(f"Bitrate: {info.bitrate // 1000} kbps")
    print(f"Codec: {info.codec}")
    print(f"Size: {info.size / (1024 * 1024):.2f} MB")
    return 0


def cmd_check_ffmpeg(args: argparse.Namespace) -> int:
    if not processor.check_ffmpeg():
        return _error("ffmpeg is not available. Install it and make sure it is on PATH.")

    print("✓ ffmpeg is available")
    try:
        capabilities = processor.get_ffmpeg_capabilities()
    except RayBanError as e:
        logger.warning(f"Could not list ffmpeg capabilities: {e}")
        return 0
    print(f"  Codecs: {len(capabilities.codecs)}")
    print(f"  Formats: {len(capabilities.formats)}")
    return 0


def cmd_check_exiftool(args: argparse.Namespace) -> int:
    if not processor.check_exiftool():
        return _error("exiftool is not available. Install it and make sure it is on PATH.")
    print(f"✓ exiftool is available (version {get_exiftool_version()})")
    return 0


def _prompt(label: str, default: str | None = None) -> str | None:
    suffix = f" [{default}]" if default else ""
    value = input(f"{label}{suffix}: ").strip()
    return value or default


def _confirm(label: str, default: bool) -> bool:
    hint = "Y/n" if default else "y/N"
    value = input(f"{label} [{hint}]: ").strip().lower()
    if not value:
        return default
    return value in ("y", "yes")


def _prompt_config() -> tuple[str | None, RayBanConfig]:
    presets = get_presets()

    path = _prompt("Video file or directory")
    front_camera = _confirm("Use front camera (Ray-Ban Stories)?", default=False)
    has_audio = _confirm("Include audio?", default=True)

    default_location = DEFAULT_LOCATION_FRONT if front_camera else DEFAULT_LOCATION_MAIN
    choices = ", ".join([*presets.location_names(), CUSTOM_LOCATION])
    location = _prompt(f"Location ({choices})", default_location)

    latitude = longitude = altitude = location_name = None
    if location == CUSTOM_LOCATION:
        latitude = _prompt("Latitude")
        longitude = _prompt("Longitude")
        altitude = _prompt("Altitude", "5")
    elif location in presets.locations:
        location_name = location
    else:
        print(f"Unknown location '{location}', using {default_location}")

    comment = _prompt("Comment (blank for default)")

    config = RayBanConfig(
        front_camera=front_camera,
        has_audio=has_audio,
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
        location_name=location_name,
        custom_comment=comment,
    )
    return path, config


def cmd_interactive(args: argparse.Namespace) -> int:
    print("=== Ray-Ban Meta Metadata Tool ===\n")

    try:
        path, config = _prompt_config()
    except (EOFError, KeyboardInterrupt):
        print()
        return _error("aborted")

    if not path:
        return _error("no path given")

    print()
    print(generate_summary(resolve(config)))
    print()

    if Path(path).is_dir():
        return _print_batch(processor.batch_process(path, config=config))
    return _report(processor.add_metadata(path, config=config), "Metadata added")


def cmd_serve(args: argparse.Namespace) -> int:
    run_server(args.host, args.port)
    return 0


# =============================================================================
# Entry points
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="rayban-meta",
        description="Add Ray-Ban Meta smart glasses metadata to videos",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = _common_parent()
    meta = _metadata_parent()
    processing = _processing_parent()

    p = subparsers.add_parser("add", parents=[common, meta, processing], help="Add metadata to a video")
    p.add_argument("input", help="Path to video file")
    p.add_argument("-o", "--output", help="Output path (default: <name>_rayban.<ext>)")
    p.set_defaults(func=cmd_add)

    p = subparsers.add_parser(
        "batch", parents=[common, meta, processing], help="Add metadata to every video in a directory"
    )
    p.add_argument("directory", help="Directory containing videos")
    p.add_argument("-o", "--output", help="Output directory")
    p.set_defaults(func=cmd_batch)

    p = subparsers.add_parser("verify", parents=[common], help="Check a video for Ray-Ban Meta metadata")
    p.add_argument("input", help="Path to video file")
    p.set_defaults(func=cmd_verify)

    p = subparsers.add_parser("presets", parents=[common], help="List camera and location presets")
    p.add_argument("--json", action="store_true", help="Output as JSON")
    p.set_defaults(func=cmd_presets)

    p = subparsers.add_parser(
        "optimize", parents=[common, meta], help="Optimize (stabilized, high quality) and add metadata"
    )
    p.add_argument("input", help="Path to video file")
    p.add_argument("-o", "--output", help="Output path (default: <name>_rayban_optimized.<ext>)")
    p.set_defaults(func=cmd_optimize)

    p = subparsers.add_parser("analyze", parents=[common], help="Rate a video's compatibility")
    p.add_argument("input", help="Path to video file")
    p.add_argument("--json", action="store_true", help="Output as JSON")
    p.set_defaults(func=cmd_analyze)

    p = subparsers.add_parser("merge", parents=[common, meta], help="Merge videos and add metadata")
    p.add_argument("inputs", nargs="+", help="Videos to merge, in order")
    p.add_argument("-o", "--output", help="Output path (required)")
    p.set_defaults(func=cmd_merge)

    p = subparsers.add_parser("thumbnail", parents=[common], help="Create a thumbnail image")
    p.add_argument("input", help="Path to video file")
    p.add_argument("-o", "--output", help="Output image (default: <name>_thumb.jpg)")
    p.add_argument("-t", "--time", default="00:00:01", help="Timestamp (default: 00:00:01)")
    p.add_argument("-s", "--size", default="320x240", help="Size WxH (default: 320x240)")
    p.set_defaults(func=cmd_thumbnail)

    p = subparsers.add_parser("frames", parents=[common], help="Extract frames at an interval")
    p.add_argument("input", help="Path to video file")
    p.add_argument("-o", "--output", help="Output directory (default: <name>_frames)")
    p.add_argument("-i", "--interval", type=float, default=1, help="Seconds between frames")
    p.add_argument("--format", choices=["jpg", "png"], default="jpg", help="Image format")
    p.set_defaults(func=cmd_frames)

    p = subparsers.add_parser("info", parents=[common], help="Show video stream information")
    p.add_argument("input", help="Path to video file")
    p.add_argument("--json", action="store_true", help="Output as JSON")
    p.set_defaults(func=cmd_info)

    p = subparsers.add_parser("check-ffmpeg", parents=[common], help="Check ffmpeg availability")
    p.set_defaults(func=cmd_check_ffmpeg)

    p = subparsers.add_parser("check-exiftool", parents=[common], help="Check exiftool availability")
    p.set_defaults(func=cmd_check_exiftool)

    p = subparsers.add_parser("interactive", parents=[common], help="Prompt for all options")
    p.set_defaults(func=cmd_interactive)

    settings = get_settings()
    p = subparsers.add_parser("serve", parents=[common], help="Run the HTTP API server")
    p.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    p.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    return args.func(args)


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Run the rayban-meta API server."""
    settings = get_settings()
    uvicorn.run(
        "rayban_meta.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=False,
    )


if __name__ == "__main__":
    sys.exit(main())
