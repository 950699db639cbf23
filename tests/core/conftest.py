"""Shared fixtures for the bookmark core tests.

Everything runs against ``MemoryStateStore`` unless a test needs the real
filesystem layout, in which case it builds a ``LocalStateStore`` on
``tmp_path`` itself.
"""

from __future__ import annotations

import pytest

from arcmark.core.managers import AppModel
from arcmark.core.settings import get_settings
from arcmark.core.store import MemoryStateStore


@pytest.fixture
def store(tmp_path) -> MemoryStateStore:
    return MemoryStateStore(icons_dir=tmp_path / "Icons")


@pytest.fixture
def model(store: MemoryStateStore) -> AppModel:
    return AppModel(store)


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Point ARCMARK_DATA_ROOT at a temp dir and re-read settings."""
    data_root = tmp_path / "data"
    monkeypatch.setenv("ARCMARK_DATA_ROOT", str(data_root))
    get_settings.cache_clear()
    yield data_root
    get_settings.cache_clear()
