"""FastAPI application for rayban-meta."""

# Setup logging before any other imports
# ruff: noqa: E402
from rayban_meta.config import get_settings
from rayban_meta.utils.logging import setup_logging

_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_file, detach_output=True)

# Create the FastAPI application
from rayban_meta.app import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=_settings.host, port=_settings.port)
