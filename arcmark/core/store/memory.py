"""In-memory state store.

Keeps the encoded document rather than the live ``AppState`` so that every
``load`` goes through the codec exactly like the filesystem store does.
Useful for dry runs and tests; ``save_count`` counts persistence events.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from uuid import UUID

from loguru import logger

from arcmark.core.codec import StateDecodeError, decode_state, encode_state
from arcmark.core.models.workspace import AppState


class MemoryStateStore:
    """In-memory implementation of the StateStore protocol."""

    def __init__(self, document: str | None = None, icons_dir: Path | None = None) -> None:
        self.document = document
        self.last_selected: UUID | None = None
        self.save_count = 0
        self._icons_dir = icons_dir

    def load(self) -> AppState:
        if self.document is not None:
            try:
                return decode_state(self.document)
            except StateDecodeError as exc:
                logger.warning("Unreadable in-memory state ({}), falling back to default state", exc)
        state = AppState.default()
        self.save(state)
        return state

    def save(self, state: AppState) -> None:
        self.document = encode_state(state)
        self.save_count += 1

    def read_last_selected(self) -> UUID | None:
        return self.last_selected

    def write_last_selected(self, workspace_id: UUID) -> None:
        self.last_selected = workspace_id

    def icons_directory(self) -> Path:
        if self._icons_dir is None:
            self._icons_dir = Path(tempfile.mkdtemp(prefix="arcmark-icons-"))
        self._icons_dir.mkdir(parents=True, exist_ok=True)
        return self._icons_dir
