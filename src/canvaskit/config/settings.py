"""
Configuration settings with environment variable loading.

All secrets MUST be provided via environment variables.
Never log or expose tokens in any output.
"""

import os
import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..canvas.client import DEFAULT_PAGE_SIZE, DEFAULT_TIMEOUT
from ..canvas.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["CanvasConfig", "ConfigurationError", "Settings", "load_settings"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CanvasConfig:
    """Canvas LMS connection configuration."""
    domain: str
    access_token: str
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if not self.domain:
            raise ConfigurationError("CANVAS_DOMAIN is required")
        if not self.access_token:
            raise ConfigurationError("CANVAS_ACCESS_TOKEN is required")
        if "://" in self.domain:
            raise ConfigurationError("CANVAS_DOMAIN must be a host name without a scheme")
        if self.timeout <= 0:
            raise ConfigurationError("CANVAS_TIMEOUT must be positive")
        if self.page_size <= 0:
            raise ConfigurationError("CANVAS_PAGE_SIZE must be positive")

    def __repr__(self) -> str:
        """Never expose token in repr."""
        return (
            f"CanvasConfig(domain='{self.domain}', access_token='***REDACTED***', "
            f"timeout={self.timeout}, page_size={self.page_size})"
        )


@dataclass(frozen=True)
class Settings:
    """
    Application settings container.

    All configuration is loaded from environment variables.
    Secrets are never logged or exposed.
    """
    canvas: CanvasConfig
    log_level: str = "INFO"

    def __post_init__(self):
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

    def __repr__(self) -> str:
        return f"Settings(canvas={self.canvas}, log_level='{self.log_level}')"


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from environment variables.

    Optionally loads from a .env file first.

    Args:
        env_file: Optional path to .env file

    Returns:
        Configured Settings instance

    Raises:
        ConfigurationError: If required configuration is missing
    """
    if env_file and env_file.exists():
        _load_env_file(env_file)
    elif Path(".env").exists():
        _load_env_file(Path(".env"))

    try:
        canvas = CanvasConfig(
            domain=os.getenv("CANVAS_DOMAIN", "").strip().rstrip("/"),
            access_token=os.getenv("CANVAS_ACCESS_TOKEN", ""),
            timeout=float(os.getenv("CANVAS_TIMEOUT", str(DEFAULT_TIMEOUT))),
            page_size=int(os.getenv("CANVAS_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
        )

        settings = Settings(
            canvas=canvas,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        logger.info("Configuration loaded successfully")
        logger.debug(f"Settings: {settings}")

        return settings

    except ConfigurationError:
        raise
    except ValueError as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e


ENV_LINE_PATTERN = re.compile(r"(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)")


def _parse_env_line(line: str) -> Optional[tuple[str, str]]:
    """Split a KEY=value line, or return None if it is not an assignment."""
    match = ENV_LINE_PATTERN.fullmatch(line)
    if match is None:
        return None
    key, value = match.groups()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def _load_env_file(path: Path) -> None:
    """
    Populate os.environ from a dotenv-style file.

    Blank lines and # comments are skipped, an ``export`` prefix is allowed,
    and one level of matching quotes is removed from values. Variables that
    are already set are left alone.
    """
    logger.debug(f"Loading environment from {path}")

    lines = path.read_text().splitlines()
    for line_num, raw in enumerate(lines, 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parsed = _parse_env_line(line)
        if parsed is None:
            logger.warning(f"Skipping line {line_num} in {path}: not a KEY=value assignment")
            continue

        os.environ.setdefault(*parsed)
