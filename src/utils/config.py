"""Environment-driven settings for ChaosBoard."""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


BACKENDS = ("memory", "elasticsearch")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_ACTING_USER = "you@example.com"
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class Settings:
    backend: str = "memory"
    seed: Optional[int] = None
    page_size: int = DEFAULT_PAGE_SIZE
    acting_user: str = DEFAULT_ACTING_USER
    log_level: str = "WARNING"


def _int_or_none(value: Optional[str], name: str) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def load_settings() -> Settings:
    """
    Read settings from the environment (and .env, if present).

    Raises:
        ValueError: If a variable holds a value of the wrong shape
    """
    backend = os.getenv("CHAOSBOARD_BACKEND", "memory").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(
            f"Unknown CHAOSBOARD_BACKEND {backend!r}. Expected one of: {', '.join(BACKENDS)}"
        )

    page_size = _int_or_none(os.getenv("CHAOSBOARD_PAGE_SIZE"), "CHAOSBOARD_PAGE_SIZE")
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    if page_size < 1:
        raise ValueError("CHAOSBOARD_PAGE_SIZE must be at least 1")

    log_level = os.getenv("CHAOSBOARD_LOG_LEVEL", "WARNING").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"Unknown CHAOSBOARD_LOG_LEVEL {log_level!r}. Expected one of: {', '.join(LOG_LEVELS)}"
        )

    return Settings(
        backend=backend,
        seed=_int_or_none(os.getenv("CHAOSBOARD_SEED"), "CHAOSBOARD_SEED"),
        page_size=page_size,
        acting_user=os.getenv("CHAOSBOARD_ACTING_USER", DEFAULT_ACTING_USER),
        log_level=log_level,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return load_settings()
