"""State store implementations for bookmark persistence."""

from arcmark.core.store.base import StateStore, favicon_cache_path
from arcmark.core.store.local import LocalStateStore
from arcmark.core.store.memory import MemoryStateStore

__all__ = ["LocalStateStore", "MemoryStateStore", "StateStore", "favicon_cache_path"]
