"""Video stamping, verification and inspection endpoints.

All processing is blocking (ffmpeg/exiftool subprocesses), so each call
runs in the thread pool. Errors raised by info and analyze are mapped to
status codes by the app-level handler.
"""

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException

from rayban_meta import processor
from rayban_meta.schemas import (
    AddRequest,
    BatchRequest,
    BatchResult,
    FileRequest,
    MergeRequest,
    ProcessResult,
    VerifyResponse,
    VideoAnalysis,
    VideoInfo,
)

router = APIRouter(prefix="/videos", tags=["videos"])
logger = logging.getLogger(__name__)


def _require_file(path: str) -> None:
    if not Path(path).is_file():
        raise HTTPException(status_code=404, detail=f"File not found: {path}")


def _require_video(path: str) -> None:
    _require_file(path)
    if not processor.is_video_file(path):
        raise HTTPException(status_code=415, detail=f"File is not a supported video: {path}")


@router.post("/add", response_model=ProcessResult)
async def add_metadata(request: AddRequest):
    """Stamp metadata onto one video, optionally transcoding it first.

    Processing failures are reported in the result, not as HTTP errors.
    """
    _require_file(request.input_path)

    return await asyncio.to_thread(
        processor.add_metadata,
        request.input_path,
        request.output_path,
        request.config,
        request.process,
        request.options,
    )


@router.post("/batch", response_model=BatchResult)
async def batch_process(request: BatchRequest):
    """Stamp every video directly inside a directory."""
    try:
        return await asyncio.to_thread(
            processor.batch_process,
            request.directory,
            request.output_dir,
            request.config,
            request.process,
            request.options,
        )
    except NotADirectoryError:
        raise HTTPException(status_code=404, detail=f"Directory not found: {request.directory}")


@router.post("/merge", response_model=ProcessResult)
async def merge(request: MergeRequest):
    """Concatenate videos in order and stamp the result.

    Fewer than two inputs is a 400.
    """
    for path in request.input_paths:
        _require_file(path)

    return await asyncio.to_thread(
        processor.merge_videos, request.input_paths, request.output_path, request.config
    )


@router.post("/verify", response_model=VerifyResponse)
async def verify(request: FileRequest):
    """Check whether a video carries the glasses' tags."""
    _require_video(request.path)

    verified = await asyncio.to_thread(processor.verify_metadata, request.path)
    return VerifyResponse(path=request.path, verified=verified)


@router.post("/info", response_model=VideoInfo)
async def info(request: FileRequest):
    """Basic stream information from ffprobe."""
    _require_video(request.path)

    return await asyncio.to_thread(processor.get_video_info, request.path)


@router.post("/analyze", response_model=VideoAnalysis)
async def analyze(request: FileRequest):
    """Rate a video's compatibility and suggest fixes."""
    _require_video(request.path)

    return await asyncio.to_thread(processor.analyze_video, request.path)
