"""Typed client for the Canvas LMS REST API."""

from .canvas import CanvasAPIError, CanvasClient, ConfigurationError

__version__ = "0.1.0"

__all__ = ["CanvasClient", "CanvasAPIError", "ConfigurationError", "__version__"]
