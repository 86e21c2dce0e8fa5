"""Environment-driven configuration."""

from .settings import CanvasConfig, Settings, load_settings

__all__ = ["CanvasConfig", "Settings", "load_settings"]
