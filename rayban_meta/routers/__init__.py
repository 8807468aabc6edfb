"""API routers for rayban-meta."""

from rayban_meta.routers.health import router as health_router
from rayban_meta.routers.presets import router as presets_router
from rayban_meta.routers.settings import router as settings_router
from rayban_meta.routers.videos import router as videos_router

__all__ = [
    "health_router",
    "presets_router",
    "settings_router",
    "videos_router",
]
