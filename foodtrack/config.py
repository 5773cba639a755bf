"""Configuration utilities.

Environment-based settings for the tracker. Values come from the process
environment, optionally seeded from a ``.env`` file:

    FOODTRACK_REFERENCE_URL=https://example.com/nutrition.json
    FOODTRACK_REFERENCE_PATH=nutrition.json
    FOODTRACK_STORAGE_BACKEND=sqlite        # sqlite | inmemory
    FOODTRACK_DB_PATH=~/.foodtrack/foodtrack.db
    FOODTRACK_STARTUP_TIMEOUT_S=3
    FOODTRACK_CLASSIFICATION_TIMEOUT_S=30
    FOODTRACK_LOG_LEVEL=INFO
    FOODTRACK_LOG_FORMAT=console            # console | json
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import structlog
from dotenv import load_dotenv

logger = structlog.get_logger(__name__)

STORAGE_BACKENDS = ("sqlite", "inmemory")


@dataclass(frozen=True)
class TrackerConfig:
    """Resolved tracker configuration."""

    reference_url: Optional[str] = None
    reference_path: Path = Path("nutrition.json")
    reference_timeout_s: float = 10.0
    storage_backend: str = "sqlite"
    db_path: Path = Path("~/.foodtrack/foodtrack.db").expanduser()
    startup_timeout_s: float = 3.0
    classification_timeout_s: float = 30.0
    log_level: str = "INFO"
    log_format: str = "console"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def get_storage_backend() -> str:
    """
    Storage backend name from FOODTRACK_STORAGE_BACKEND.

    Unknown values fall back to "sqlite".
    """
    mode = os.getenv("FOODTRACK_STORAGE_BACKEND", "sqlite").strip().lower()
    if mode not in STORAGE_BACKENDS:
        logger.warning("Unknown storage backend, using sqlite", requested=mode)
        return "sqlite"
    return mode


def load_config(env_file: Optional[Union[str, Path]] = None) -> TrackerConfig:
    """
    Build configuration from the environment.

    Args:
        env_file: Optional ``.env`` file loaded first (existing environment
            variables win)

    Raises:
        ValueError: If a timeout is not a number
    """
    if env_file is not None:
        load_dotenv(env_file)

    defaults = TrackerConfig()
    reference_url = os.getenv("FOODTRACK_REFERENCE_URL") or None
    db_path = os.getenv("FOODTRACK_DB_PATH")
    reference_path = os.getenv("FOODTRACK_REFERENCE_PATH")

    return TrackerConfig(
        reference_url=reference_url,
        reference_path=Path(reference_path).expanduser() if reference_path else defaults.reference_path,
        reference_timeout_s=_get_float("FOODTRACK_REFERENCE_TIMEOUT_S", defaults.reference_timeout_s),
        storage_backend=get_storage_backend(),
        db_path=Path(db_path).expanduser() if db_path else defaults.db_path,
        startup_timeout_s=_get_float("FOODTRACK_STARTUP_TIMEOUT_S", defaults.startup_timeout_s),
        classification_timeout_s=_get_float(
            "FOODTRACK_CLASSIFICATION_TIMEOUT_S", defaults.classification_timeout_s
        ),
        log_level=os.getenv("FOODTRACK_LOG_LEVEL", defaults.log_level).upper(),
        log_format=os.getenv("FOODTRACK_LOG_FORMAT", defaults.log_format).lower(),
    )
