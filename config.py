"""
Runtime configuration for the meeting parser.

Built once from the environment (``.env`` is loaded by ``main``) and then
treated as read-only; every component receives it explicitly.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_DENYLIST = ("@agency.com", "@talentagency.com")
DEFAULT_LOCATION_KEYWORDS = ("beverly hills",)


@dataclass(frozen=True)
class Settings:
    model: str = DEFAULT_MODEL
    default_timezone: str = DEFAULT_TIMEZONE
    auth_token: Optional[str] = None
    """Shared bearer secret. ``None`` rejects every request."""

    scheduler_denylist: Tuple[str, ...] = DEFAULT_DENYLIST
    signature_location_keywords: Tuple[str, ...] = DEFAULT_LOCATION_KEYWORDS

    completion_api_key: Optional[str] = None
    completion_api_base: str = DEFAULT_API_BASE
    completion_timeout: float = 60.0
    temperature: float = 0.2

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            model=os.getenv("MODEL") or DEFAULT_MODEL,
            default_timezone=os.getenv("DEFAULT_TIMEZONE") or DEFAULT_TIMEZONE,
            auth_token=os.getenv("AUTH_TOKEN") or None,
            scheduler_denylist=_getenv_list("SCHEDULER_DENYLIST", DEFAULT_DENYLIST),
            signature_location_keywords=_getenv_list(
                "SIGNATURE_LOCATION_KEYWORDS", DEFAULT_LOCATION_KEYWORDS
            ),
            completion_api_key=os.getenv("COMPLETION_API_KEY") or None,
            completion_api_base=(os.getenv("COMPLETION_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            completion_timeout=_getenv_float("COMPLETION_TIMEOUT", 60.0),
            temperature=_getenv_float("COMPLETION_TEMPERATURE", 0.2),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def parse_list(raw: str) -> Tuple[str, ...]:
    """Split a comma-separated value into trimmed, lowercase, non-empty items."""
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


def _getenv_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    items = parse_list(os.getenv(key, ""))
    return items or default


def _getenv_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default
