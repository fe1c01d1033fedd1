"""Async client that walks a session through the roast flow."""

from .orchestrator import ApiError, RoastSession, prepare_image

__all__ = ["ApiError", "RoastSession", "prepare_image"]
