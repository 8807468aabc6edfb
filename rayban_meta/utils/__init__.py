"""Utility functions for rayban-meta."""

from rayban_meta.utils.logging import setup_logging

__all__ = ["setup_logging"]
