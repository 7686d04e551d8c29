"""Lambda handlers for Climb Gear Planner API."""

from .api_handler import api_handler

__all__ = ["api_handler"]
