"""Centralised settings for pagechain.

All runtime configuration that is not part of a crawl document is resolved
here in one place.  Values can be overridden via environment variables or a
`.env` file in the project root (loaded automatically when this module is
imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in _TRUTHY


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("PAGECHAIN_MAX_ATTEMPTS", "3"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PAGECHAIN_REQUEST_TIMEOUT", "30.0"))
    )
    retry_delay: float = field(
        default_factory=lambda: float(os.environ.get("PAGECHAIN_RETRY_DELAY", "0.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "PAGECHAIN_USER_AGENT",
            "Mozilla/5.0 (compatible; pagechain/0.1)",
        )
    )

    # ------------------------------------------------------------------
    # Crawl loop
    # ------------------------------------------------------------------
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("PAGECHAIN_MAX_PAGES", "0"))
    )
    detect_cycles: bool = field(
        default_factory=lambda: _env_bool("PAGECHAIN_DETECT_CYCLES", "true")
    )
    # Host-relative links ("/a/b") resolve to "host/a/b" unless this is set,
    # in which case the base URL's scheme is kept ("http://host/a/b").
    absolute_host_links: bool = field(
        default_factory=lambda: _env_bool("PAGECHAIN_ABSOLUTE_HOST_LINKS", "false")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("PAGECHAIN_LOG_LEVEL", "WARNING").upper()
    )


# Module-level singleton, import this everywhere:
#   from pagechain.config import settings
settings = Settings()
