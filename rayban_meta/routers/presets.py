"""Preset listing and metadata preview endpoints."""

import logging

from fastapi import APIRouter

from rayban_meta.metadata import resolve
from rayban_meta.presets import PresetTable, get_presets
from rayban_meta.schemas import RayBanConfig, RayBanMetadata

router = APIRouter(tags=["presets"])
logger = logging.getLogger(__name__)


@router.get("/presets", response_model=PresetTable)
async def list_presets():
    """Camera, location, device profile and quality presets."""
    return get_presets()


@router.post("/metadata/preview", response_model=RayBanMetadata)
async def preview_metadata(config: RayBanConfig):
    """Resolve the metadata a config would stamp, without touching any file."""
    return resolve(config)
