"""
Service Settings

Immutable runtime configuration, read once from the environment at startup
and passed explicitly to the components that need it.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from app.core.cors import parse_allowed_origins

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _env(key: str) -> Optional[str]:
    """Return a stripped env value, or None when unset / blank."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class Settings:
    """Startup configuration for the HTTP edge."""
    allowed_origins: Tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    version: str = "1.0.0"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        ALLOWED_ORIGINS and CORS_ALLOWED_ORIGINS are comma-separated
        allow-lists merged in that order; FRONTEND_ORIGIN is appended when set.
        Duplicates keep their first position.
        """
        if load_env_file:
            load_dotenv(PROJECT_ROOT / ".env")

        origins = list(parse_allowed_origins(_env("ALLOWED_ORIGINS")))
        origins.extend(parse_allowed_origins(_env("CORS_ALLOWED_ORIGINS")))
        origins.extend(parse_allowed_origins(_env("FRONTEND_ORIGIN")))

        deduped = tuple(dict.fromkeys(origins))

        return cls(
            allowed_origins=deduped,
            log_level=_env("LOG_LEVEL") or "INFO",
            log_file=_env("LOG_FILE"),
        )
