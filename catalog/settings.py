"""Environment-driven configuration for the catalog client.

Environment variables:
  JOB_CATALOG_API_URL              : base URL of the catalog API
                                      (default http://localhost:8080/api)
  JOB_CATALOG_TIMEOUT_SECONDS      : per-request timeout (default 10)
  JOB_CATALOG_PAGE_SIZE            : default page size (default 20)
  JOB_CATALOG_REFRESH_DELAY_SECONDS : wait before re-listing after an
                                      accepted ingestion (default 5)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from catalog.constants import DEFAULT_PAGE_SIZE, INGESTION_REFRESH_DELAY_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT_SECONDS = 10.0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"[CatalogSettings] Ignoring invalid {name}={raw!r}; using {default}")
        return default
    if value < 0:
        logger.warning(f"[CatalogSettings] Ignoring negative {name}={raw!r}; using {default}")
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"[CatalogSettings] Ignoring invalid {name}={raw!r}; using {default}")
        return default
    if value <= 0:
        logger.warning(f"[CatalogSettings] Ignoring non-positive {name}={raw!r}; using {default}")
        return default
    return value


@dataclass(frozen=True)
class CatalogSettings:
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    page_size: int = DEFAULT_PAGE_SIZE
    refresh_delay_seconds: float = INGESTION_REFRESH_DELAY_SECONDS

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "CatalogSettings":
        """Read settings from the environment, priming it from a .env file if present."""
        load_dotenv(dotenv_path=dotenv_path, override=False)
        api_url = (os.getenv("JOB_CATALOG_API_URL") or DEFAULT_API_URL).strip().rstrip("/")
        return cls(
            api_url=api_url or DEFAULT_API_URL,
            timeout_seconds=_env_float("JOB_CATALOG_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            page_size=_env_int("JOB_CATALOG_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            refresh_delay_seconds=_env_float(
                "JOB_CATALOG_REFRESH_DELAY_SECONDS", INGESTION_REFRESH_DELAY_SECONDS
            ),
        )
