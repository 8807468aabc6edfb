"""Health and tool availability endpoints."""

import asyncio
import logging

from fastapi import APIRouter

from rayban_meta import __version__
from rayban_meta.ffmpeg import check_ffmpeg, get_capabilities
from rayban_meta.metadata import check_exiftool, get_exiftool_version
from rayban_meta.schemas import HealthResponse, ToolCapabilities, ToolStatus

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


def _tool_status() -> ToolStatus:
    ffmpeg_ok = check_ffmpeg()
    exiftool_ok = check_exiftool()
    return ToolStatus(
        ffmpeg=ffmpeg_ok,
        exiftool=exiftool_ok,
        exiftool_version=get_exiftool_version() if exiftool_ok else None,
    )


@router.get("/tools", response_model=ToolStatus)
async def tools():
    """Report whether ffmpeg and exiftool can be started."""
    return await asyncio.to_thread(_tool_status)


@router.get("/tools/ffmpeg", response_model=ToolCapabilities)
async def ffmpeg_capabilities():
    """List the codecs and formats the installed ffmpeg supports.

    503 when ffmpeg is not installed.
    """
    return await asyncio.to_thread(get_capabilities)
