"""Configuration loaded from ARCMARK_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_data_root() -> str:
    return str(Path.home() / ".arcmark")


class ArcmarkSettings(BaseSettings):
    """Arcmark settings.

    All fields are read from environment variables with the ``ARCMARK_``
    prefix.  For example, ``ARCMARK_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARCMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Data storage ----------------------------------------------------------
    data_root: str = _default_data_root()
    """Directory holding ``data.json``, the last-selected hint and the favicon cache."""

    # -- Metadata fetchers -----------------------------------------------------
    favicon_timeout: float = 5.0
    favicon_failure_cooldown: float = 300.0
    """Seconds to wait before retrying a host whose favicon fetch failed."""

    title_timeout: float = 6.0
    title_max_bytes: int = 200_000
    """Only the head of a page is scanned for ``<title>``."""


@lru_cache(maxsize=1)
def get_settings() -> ArcmarkSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return ArcmarkSettings()
