"""
Configuration helpers for the book review backend.

Routers, services and stores receive a Settings object instead of reading
os.environ directly, so tests can swap the environment and clear the cache.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

STORAGE_BACKENDS = ("json", "memory", "sql")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_dir: Path
    database_url: str
    session_ttl_seconds: int
    seed_sample_data: bool
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    backend = (os.getenv("STORAGE_BACKEND") or "json").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=backend,
        data_dir=Path(os.getenv("DATA_DIR") or Path.cwd() / "data"),
        database_url=os.getenv("DATABASE_URL", ""),
        session_ttl_seconds=max(60, _int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400)),
        seed_sample_data=_bool(os.getenv("SEED_SAMPLE_DATA"), True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )
