"""Local filesystem state store.

Stores the state document under a data root::

    {data_root}/data.json
    {data_root}/last_selected_workspace
    {data_root}/Icons/

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path.  This prevents corrupt reads if the process
crashes mid-write.

A document that cannot be decoded is replaced with a fresh default state.
Losing one corrupt file is preferable to an application that cannot start.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from uuid import UUID

from loguru import logger

from arcmark.core.codec import StateDecodeError, decode_state, encode_state
from arcmark.core.models.workspace import AppState

DATA_FILENAME = "data.json"
LAST_SELECTED_FILENAME = "last_selected_workspace"
ICONS_DIRNAME = "Icons"


class LocalStateStore:
    """Local filesystem implementation of the StateStore protocol."""

    def __init__(self, data_root: str | Path) -> None:
        self._base = Path(data_root).expanduser()
        self._data_path = self._base / DATA_FILENAME
        self._last_selected_path = self._base / LAST_SELECTED_FILENAME

    @property
    def data_path(self) -> Path:
        return self._data_path

    # -- Read ------------------------------------------------------------------

    def load(self) -> AppState:
        if not self._data_path.exists():
            logger.info("No state at {}, creating default state", self._data_path)
            return self._reset()

        try:
            raw = self._data_path.read_bytes()
            return decode_state(raw)
        except (OSError, UnicodeDecodeError, StateDecodeError) as exc:
            logger.warning("Unreadable state at {} ({}), falling back to default state", self._data_path, exc)
            return self._reset()

    def read_last_selected(self) -> UUID | None:
        try:
            raw = self._last_selected_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            logger.debug("Ignoring undecodable last-selected hint")
            return None
        try:
            return UUID(raw)
        except ValueError:
            logger.debug("Ignoring malformed last-selected hint {!r}", raw)
            return None

    # -- Write -----------------------------------------------------------------

    def save(self, state: AppState) -> None:
        try:
            _atomic_write(self._data_path, encode_state(state))
        except OSError as exc:
            logger.error("Failed to save state to {}: {}", self._data_path, exc)

    def write_last_selected(self, workspace_id: UUID) -> None:
        try:
            _atomic_write(self._last_selected_path, str(workspace_id))
        except OSError as exc:
            logger.error("Failed to save last selected workspace: {}", exc)

    # -- Utilities -------------------------------------------------------------

    def icons_directory(self) -> Path:
        path = self._base / ICONS_DIRNAME
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _reset(self) -> AppState:
        state = AppState.default()
        self.save(state)
        return state


# -- Sync helpers --------------------------------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    Ensures readers never see a partially-written file.  The temp file is
    created in the same directory so ``os.replace`` is atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up temp file on any failure.
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise
