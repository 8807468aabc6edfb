"""FastAPI app factory for rayban-meta."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rayban_meta import __version__
from rayban_meta.errors import (
    ExternalToolUnavailable,
    InsufficientInputsError,
    RayBanError,
    ReadError,
    UnsupportedFileType,
)
from rayban_meta.routers import (
    health_router,
    presets_router,
    settings_router,
    videos_router,
)

logger = logging.getLogger(__name__)

# Anything not listed maps to 500
ERROR_STATUS_CODES: dict[type[RayBanError], int] = {
    UnsupportedFileType: 415,
    ReadError: 422,
    InsufficientInputsError: 400,
    ExternalToolUnavailable: 503,
}


def status_code_for(error: RayBanError) -> int:
    """HTTP status code for a processing error."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500


async def rayban_error_handler(request: Request, exc: RayBanError) -> JSONResponse:
    """Turn processing errors that escape a route into JSON responses."""
    status_code = status_code_for(exc)
    logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Ray-Ban Meta Metadata",
        description="Stamp Ray-Ban Meta smart glasses metadata onto videos",
        version=__version__,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RayBanError, rayban_error_handler)  # type: ignore[arg-type]

    # Include routers
    app.include_router(health_router)
    app.include_router(presets_router)
    app.include_router(videos_router)
    app.include_router(settings_router)

    return app
