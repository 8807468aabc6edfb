"""Settings endpoints."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from rayban_meta.config import Settings, get_settings, reload_settings, save_config_to_file
from rayban_meta.schemas import SettingsUpdate

router = APIRouter(tags=["settings"])
logger = logging.getLogger(__name__)


@router.get("/settings", response_model=Settings)
async def get_settings_endpoint():
    """Get current settings."""
    return get_settings()


@router.put("/settings", response_model=Settings)
async def update_settings(update: SettingsUpdate):
    """Update settings and persist them to the config file.

    Only provided fields change. An empty temp_dir clears it. A new
    log_level takes effect immediately.
    """
    changes = update.model_dump(exclude_unset=True)
    if changes.get("temp_dir") == "":
        changes["temp_dir"] = None

    try:
        updated = Settings(**{**get_settings().model_dump(), **changes})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    save_config_to_file(updated)
    new_settings = reload_settings()

    if "log_level" in changes:
        logging.getLogger().setLevel(new_settings.log_level)

    logger.info(f"Settings updated: {list(changes.keys())}")
    return new_settings
