"""Test that all required dependencies are importable."""

import importlib

import pytest


class TestBaseDependencies:
    """Test base dependencies that are always required."""

    @pytest.mark.parametrize(
        "module",
        [
            "fastapi",
            "uvicorn",
            "pydantic",
            "exiftool",
            "httpx",
        ],
    )
    def test_base_dependency_importable(self, module: str):
        """Verify base dependency can be imported."""
        try:
            importlib.import_module(module)
        except ImportError as e:
            pytest.fail(f"Base dependency '{module}' not importable: {e}")


class TestRayBanMetaImports:
    """Test that rayban_meta modules are importable."""

    @pytest.mark.parametrize(
        "module",
        [
            "rayban_meta",
            "rayban_meta.app",
            "rayban_meta.cli",
            "rayban_meta.config",
            "rayban_meta.schemas",
            "rayban_meta.presets",
            "rayban_meta.processor",
            "rayban_meta.metadata",
            "rayban_meta.ffmpeg",
            "rayban_meta.routers",
        ],
    )
    def test_rayban_meta_module_importable(self, module: str):
        """Verify rayban_meta module can be imported."""
        try:
            importlib.import_module(module)
        except ImportError as e:
            pytest.fail(f"Module '{module}' not importable: {e}")
