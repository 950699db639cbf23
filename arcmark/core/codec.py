"""Versioned JSON encoding of ``AppState``.

The document is the camelCase dump of the pydantic models with sorted keys,
so repeated saves of the same state are byte-identical.  Decoding is
tolerant of older documents:

- a workspace without ``pinnedLinks`` decodes with an empty list,
- a state without ``isSettingsSelected`` decodes as False,
- unknown keys (such as the per-workspace ``emoji`` of early releases) are
  ignored.

Anything else missing or malformed raises ``StateDecodeError``.  An empty
``workspaces`` list is *not* an error here; the workspace store synthesises
a default workspace for it.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger
from pydantic import ValidationError

from arcmark.core.models.workspace import CURRENT_SCHEMA_VERSION, AppState


class StateDecodeError(ValueError):
    """Raised when a persisted document cannot be turned into an ``AppState``."""


def encode_state(state: AppState) -> str:
    payload = state.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)


def decode_state(raw: str | bytes) -> AppState:
    try:
        data = json.loads(raw)
    except UnicodeDecodeError as exc:
        msg = f"State document is not valid UTF-8: {exc}"
        raise StateDecodeError(msg) from None
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON: {exc}"
        raise StateDecodeError(msg) from None

    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise StateDecodeError(msg)

    data = _migrate(data)

    try:
        return AppState.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid state document: {exc.error_count()} error(s)\n{exc}"
        raise StateDecodeError(msg) from None


def _migrate(data: dict[str, Any]) -> dict[str, Any]:
    """Bring an older document up to the current schema, in place."""
    version = data.get("schemaVersion")
    if isinstance(version, int) and version > CURRENT_SCHEMA_VERSION:
        logger.warning(
            "State document has schemaVersion {} (newer than {}); decoding best-effort",
            version,
            CURRENT_SCHEMA_VERSION,
        )
    # Version 1 is the only released layout; the tolerant fields above are
    # handled by model defaults.
    return data
