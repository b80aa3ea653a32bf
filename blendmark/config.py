"""
Application Configuration
=========================
Environment-driven settings and logging setup.

Environment variables:
- BLENDMARK_LOG_LEVEL: logging level name (default WARNING)
- BLENDMARK_JPEG_QUALITY: JPEG quality 1-100 (default 95)
- BLENDMARK_WORKERS: blending threads 1-64 (default 1)

Command-line flags override these values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def _int_env(name: str, default: int, *, min_value: int, max_value: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, not an integer", name, raw)
        return default
    clamped = max(min_value, min(max_value, value))
    if clamped != value:
        logger.warning("Clamped %s=%d to %d", name, value, clamped)
    return clamped


@dataclass(frozen=True)
class AppConfig:
    log_level: str = "WARNING"
    jpeg_quality: int = 95
    workers: int = 1

    @staticmethod
    def load() -> "AppConfig":
        log_level = (os.getenv("BLENDMARK_LOG_LEVEL") or "WARNING").strip().upper()
        jpeg_quality = _int_env("BLENDMARK_JPEG_QUALITY", 95, min_value=1, max_value=100)
        workers = _int_env("BLENDMARK_WORKERS", 1, min_value=1, max_value=64)

        return AppConfig(
            log_level=log_level,
            jpeg_quality=jpeg_quality,
            workers=workers,
        )


def configure_logging(level: str = "WARNING") -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
