"""Import bookmarks from Arc Browser's ``StorableSidebar.json``.

Arc keeps its sidebar as a flat item table.  The container holding both
``spaces`` and ``items`` is the one with bookmark data; each space lists its
container ids as ``[..., "pinned", <pinned container id>, ...]``.  Items
point to their parent with ``parentID`` and list children in
``childrenIds``::

    {"id": "...", "title": "...", "parentID": "...", "childrenIds": [...],
     "data": {"tab": {"savedTitle": "...", "savedURL": "..."}}}

Only pinned containers are imported.  Arc files routinely contain nulls
where a field would be expected; those fall back to "Untitled" titles or
skip the item rather than failing the whole import.
"""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from anyio import to_thread
from loguru import logger
from pydantic import BaseModel, Field

from arcmark.core import tree
from arcmark.core.models.enums import WorkspaceColorId
from arcmark.core.models.nodes import Node, make_folder, make_link

UNTITLED_SPACE = "Untitled"
UNTITLED_FOLDER = "Untitled Folder"
UNTITLED_LINK = "Untitled"


class ArcImportError(ValueError):
    """Base class for Arc import failures."""


class ArcFileNotFoundError(ArcImportError, LookupError):
    """Raised when the sidebar file does not exist."""


class ArcInvalidJSONError(ArcImportError):
    """Raised when the file is not a sidebar document."""


class ArcNoDataContainerError(ArcImportError):
    """Raised when no container holds both spaces and items."""


# -- Result models -------------------------------------------------------------


class ImportWorkspace(BaseModel):
    name: str
    color_id: WorkspaceColorId
    nodes: list[Node] = Field(default_factory=list)


class ArcImportResult(BaseModel):
    workspaces: list[ImportWorkspace] = Field(default_factory=list)
    links_imported: int = 0
    folders_imported: int = 0

    @property
    def workspaces_created(self) -> int:
        return len(self.workspaces)


# -- Entry points --------------------------------------------------------------


async def import_arc_file(path: str | Path) -> ArcImportResult:
    """Read and convert an Arc sidebar file off the event loop."""
    return await to_thread.run_sync(partial(import_arc_file_sync, Path(path)))


def import_arc_file_sync(path: Path) -> ArcImportResult:
    if not path.is_file():
        msg = f"Arc bookmark file not found: {path}"
        raise ArcFileNotFoundError(msg)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"Invalid Arc bookmark file: {exc}"
        raise ArcInvalidJSONError(msg) from None
    return parse_arc_data(data)


def parse_arc_data(data: Any) -> ArcImportResult:
    containers = _containers(data)
    container = next(
        (c for c in containers if isinstance(c, dict) and c.get("spaces") is not None and c.get("items") is not None),
        None,
    )
    if container is None or not isinstance(container["spaces"], list) or not isinstance(container["items"], list):
        msg = "No bookmark data found in Arc file"
        raise ArcNoDataContainerError(msg)

    items = {item["id"]: item for item in container["items"] if isinstance(item, dict) and "id" in item}
    spaces = [space for space in container["spaces"] if isinstance(space, dict)]

    colors = list(WorkspaceColorId)
    used_names: dict[str, int] = {}
    result = ArcImportResult()

    for index, space in enumerate(spaces):
        pinned_id = _pinned_container_id(space)
        if pinned_id is None:
            continue
        nodes = _ArcTreeBuilder(items).build(pinned_id)
        if not nodes:
            continue

        name = _unique_name(space.get("title") or UNTITLED_SPACE, used_names)
        result.workspaces.append(ImportWorkspace(name=name, color_id=colors[index % len(colors)], nodes=nodes))
        links, folders = tree.count_nodes(nodes)
        result.links_imported += links
        result.folders_imported += folders

    logger.info(
        "Arc import: {} workspace(s), {} link(s), {} folder(s)",
        result.workspaces_created,
        result.links_imported,
        result.folders_imported,
    )
    return result


# -- Helpers ---------------------------------------------------------------------


def _containers(data: Any) -> list:
    try:
        containers = data["sidebar"]["containers"]
    except (KeyError, TypeError):
        msg = "Missing sidebar.containers"
        raise ArcInvalidJSONError(msg) from None
    if not isinstance(containers, list):
        msg = "sidebar.containers is not a list"
        raise ArcInvalidJSONError(msg)
    return containers


def _pinned_container_id(space: dict) -> str | None:
    container_ids = space.get("containerIDs") or []
    try:
        position = container_ids.index("pinned")
    except ValueError:
        return None
    if position + 1 >= len(container_ids):
        return None
    return str(container_ids[position + 1])


def _unique_name(base: str, used: dict[str, int]) -> str:
    count = used.get(base)
    if count is None:
        used[base] = 1
        return base
    used[base] = count + 1
    return f"{base} {count + 1}"


def _is_valid_url(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    try:
        urlsplit(url)
    except ValueError:
        return False
    return True


class _ArcTreeBuilder:
    """Turns the flat item table into a node forest, in Arc's order."""

    def __init__(self, items: dict[str, dict]) -> None:
        self._items = items
        self._visited: set[str] = set()

    def build(self, parent_id: str) -> list[Node]:
        nodes: list[Node] = []
        for item in self._children_of(parent_id):
            item_id = item["id"]
            if item_id in self._visited:
                logger.debug("Skipping repeated Arc item {}", item_id)
                continue
            self._visited.add(item_id)

            node = self._convert(item)
            if node is not None:
                nodes.append(node)
        return nodes

    def _children_of(self, parent_id: str) -> list[dict]:
        parent = self._items.get(parent_id)
        ordered = parent.get("childrenIds") if parent else None
        if ordered:
            return [self._items[child_id] for child_id in ordered if child_id in self._items]
        return [item for item in self._items.values() if item.get("parentID") == parent_id]

    def _convert(self, item: dict) -> Node | None:
        if item.get("childrenIds"):
            children = self.build(item["id"])
            return make_folder(item.get("title") or UNTITLED_FOLDER, children, is_expanded=False)

        tab = (item.get("data") or {}).get("tab")
        if not isinstance(tab, dict):
            return None
        url = tab.get("savedURL")
        if not _is_valid_url(url):
            logger.debug("Skipping Arc item {} without a usable URL", item["id"])
            return None
        return make_link(url, tab.get("savedTitle") or UNTITLED_LINK)
