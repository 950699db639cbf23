"""State store interface for bookmark persistence.

The store owns one JSON document holding the whole ``AppState`` plus a
small "last selected workspace" hint kept outside that document, so
restoring the selection never depends on a full state write.

Unlike a remote blob store, every call is synchronous: a mutation is
durable by the time the ``AppModel`` method that caused it returns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable
from uuid import UUID

from arcmark.core.models.workspace import AppState


@runtime_checkable
class StateStore(Protocol):
    """Sync protocol for reading and writing the bookmark state.

    Storage layout::

        {root}/data.json
        {root}/last_selected_workspace
        {root}/Icons/{host}.ico
    """

    def load(self) -> AppState:
        """Return the stored state, or a fresh default state if missing or unreadable."""
        ...

    def save(self, state: AppState) -> None:
        """Persist the full state.  Failures are logged, never raised."""
        ...

    def read_last_selected(self) -> UUID | None:
        """Return the last selected workspace id hint, if any."""
        ...

    def write_last_selected(self, workspace_id: UUID) -> None:
        """Record the last selected workspace id hint."""
        ...

    def icons_directory(self) -> Path:
        """Directory holding cached favicons, created on demand."""
        ...


def favicon_cache_path(icons_dir: Path, host: str) -> Path:
    """Deterministic cache file for a host's favicon: ``example.com_8080.ico``."""
    return icons_dir / (host.lower().replace(":", "_") + ".ico")
