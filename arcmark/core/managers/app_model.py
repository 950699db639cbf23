"""Application model -- the single entry point for reading and editing bookmarks.

Wraps the ``WorkspaceStore`` and the tree operations with the business
rules that span them:

- at most ``MAX_PINNED_LINKS`` pinned links per workspace,
- a folder can never be moved into itself or its own subtree,
- the last workspace can never be deleted,
- redundant writes (same favicon path, same name, ...) are skipped.

Every mutation is atomic from the caller's point of view: it edits the
in-memory ``AppState``, saves it through the ``StateStore`` and then calls
``on_change``, all before returning.  Calls that change nothing return a
falsy ``MutationResult`` explaining why and neither persist nor notify.
Nothing here raises for stale ids or rejected edits.

The model is single-writer and does no locking; callers serialise access
(one thread, or one event loop).  Read accessors hand out deep copies so
the live state can only change through this API.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING
from urllib.parse import urlsplit
from uuid import UUID

from loguru import logger

from arcmark.core import tree
from arcmark.core.filtering import filter_nodes
from arcmark.core.managers.workspaces import WorkspaceStore
from arcmark.core.models import mutation
from arcmark.core.models.enums import MoveDirection, WorkspaceColorId
from arcmark.core.models.mutation import MutationResult
from arcmark.core.models.nodes import (
    FolderNode,
    Link,
    LinkNode,
    Node,
    NodeLocation,
    make_folder,
    make_link,
)
from arcmark.core.models.workspace import MAX_PINNED_LINKS, AppState, Workspace

if TYPE_CHECKING:
    from arcmark.core.importers.arc import ArcImportResult
    from arcmark.core.store.base import StateStore


def default_title(url: str) -> str:
    """Title a link gets before the page title is known: the URL host, else the raw URL."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return url
    return host or url


class AppModel:
    """Mutation API over the whole bookmark state."""

    def __init__(self, store: StateStore | None = None) -> None:
        if store is None:
            from arcmark.core.settings import get_settings
            from arcmark.core.store.local import LocalStateStore

            store = LocalStateStore(get_settings().data_root)

        self._store = store
        self._state: AppState = store.load()
        self.on_change: Callable[[], None] | None = None
        self._workspaces = WorkspaceStore(self._state, store, on_heal=self._commit)

        if not self._workspaces.ensure_default():
            self._workspaces.restore_selection()
        logger.debug("Loaded {} workspace(s)", len(self._state.workspaces))

    # -- Persistence -----------------------------------------------------------

    def _commit(self) -> None:
        self._store.save(self._state)
        if self.on_change is not None:
            self.on_change()

    def _apply(self, result: MutationResult) -> MutationResult:
        if result:
            self._commit()
        return result

    @property
    def _items(self) -> list[Node]:
        return self._workspaces.current.items

    # -- Queries (snapshots) ---------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state.model_copy(deep=True)

    @property
    def workspaces(self) -> list[Workspace]:
        return [workspace.model_copy(deep=True) for workspace in self._workspaces.workspaces]

    @property
    def current_workspace(self) -> Workspace:
        return self._workspaces.current.model_copy(deep=True)

    @property
    def is_settings_selected(self) -> bool:
        return self._state.is_settings_selected

    def node_by_id(self, node_id: UUID) -> Node | None:
        node = tree.find(self._items, node_id)
        return node.model_copy(deep=True) if node is not None else None

    def location(self, node_id: UUID) -> NodeLocation | None:
        return tree.locate(self._items, node_id)

    def pinned_link_by_id(self, link_id: UUID) -> Link | None:
        link = self._pinned_link(link_id)
        return link.model_copy() if link is not None else None

    @property
    def can_pin_more(self) -> bool:
        return len(self._workspaces.current.pinned_links) < MAX_PINNED_LINKS

    def filtered_items(self, query: str) -> list[Node]:
        """Current workspace's forest narrowed to links whose title matches ``query``."""
        if not query:
            return [node.model_copy(deep=True) for node in self._items]
        return filter_nodes(self._items, query)

    def link_urls(self, node_ids: Iterable[UUID]) -> list[str]:
        """URLs of the given ids that are links, in the given order."""
        urls = []
        for node_id in node_ids:
            node = tree.find_link(self._items, node_id)
            if node is not None:
                urls.append(node.link.url)
        return urls

    def _pinned_link(self, link_id: UUID) -> Link | None:
        for link in self._workspaces.current.pinned_links:
            if link.id == link_id:
                return link
        return None

    # -- Workspaces ------------------------------------------------------------

    def select_workspace(self, workspace_id: UUID) -> MutationResult:
        return self._apply(self._workspaces.select(workspace_id))

    def select_settings(self) -> MutationResult:
        return self._apply(self._workspaces.select_settings())

    def create_workspace(self, name: str, color_id: WorkspaceColorId | None = None) -> MutationResult:
        result = self._apply(self._workspaces.create(name, color_id))
        logger.debug("Created workspace {!r} ({})", name, result.id)
        return result

    def rename_workspace(self, workspace_id: UUID, name: str) -> MutationResult:
        return self._apply(self._workspaces.rename(workspace_id, name))

    def update_workspace_color(self, workspace_id: UUID, color_id: WorkspaceColorId) -> MutationResult:
        return self._apply(self._workspaces.set_color(workspace_id, color_id))

    def delete_workspace(self, workspace_id: UUID) -> MutationResult:
        return self._apply(self._workspaces.delete(workspace_id))

    def move_workspace(self, workspace_id: UUID, direction: MoveDirection) -> MutationResult:
        return self._apply(self._workspaces.reorder(workspace_id, direction))

    def reorder_workspace(self, workspace_id: UUID, to_index: int) -> MutationResult:
        return self._apply(self._workspaces.move_to_index(workspace_id, to_index))

    def import_workspaces(self, result: ArcImportResult) -> list[UUID]:
        """Append every imported workspace, keeping the current selection.  Saves once."""
        created = []
        for imported in result.workspaces:
            workspace = Workspace.new(imported.name, imported.color_id, imported.nodes)
            self._workspaces.append(workspace)
            created.append(workspace.id)
        if created:
            self._commit()
            logger.info("Imported {} workspace(s)", len(created))
        return created

    # -- Nodes: create ---------------------------------------------------------

    def add_folder(self, name: str, parent_id: UUID | None = None, *, is_expanded: bool = True) -> MutationResult:
        return self._insert(make_folder(name, is_expanded=is_expanded), parent_id)

    def add_link(self, url: str, title: str | None = None, parent_id: UUID | None = None) -> MutationResult:
        if title is None:
            title = default_title(url)
        result = self._insert(make_link(url, title), parent_id)
        if result:
            logger.debug("Added link {!r} -> {}", title, url)
        return result

    def _insert(self, node: Node, parent_id: UUID | None) -> MutationResult:
        if not tree.insert(self._items, node, parent_id):
            logger.warning("Insert of {} under missing folder {} rejected", node.id, parent_id)
            return mutation.NOT_FOUND
        self._commit()
        return MutationResult.applied(node.id)

    # -- Nodes: edit -----------------------------------------------------------

    def rename_node(self, node_id: UUID, new_name: str) -> MutationResult:
        node = tree.find(self._items, node_id)
        if node is None:
            return mutation.NOT_FOUND
        if node.display_name == new_name:
            return mutation.UNCHANGED
        return self._update(node_id, lambda n: _renamed(n, new_name))

    def set_folder_expanded(self, folder_id: UUID, is_expanded: bool) -> MutationResult:
        node = tree.find(self._items, folder_id)
        if node is None:
            return mutation.NOT_FOUND
        if not isinstance(node, FolderNode):
            return mutation.INVALID_TARGET
        if node.folder.is_expanded == is_expanded:
            return mutation.UNCHANGED
        return self._update(
            folder_id, lambda n: FolderNode(folder=n.folder.model_copy(update={"is_expanded": is_expanded}))
        )

    def update_link_favicon_path(self, link_id: UUID, path: str | None) -> MutationResult:
        node = tree.find(self._items, link_id)
        if node is None:
            return mutation.NOT_FOUND
        if not isinstance(node, LinkNode):
            return mutation.INVALID_TARGET
        if node.link.favicon_path == path:
            return mutation.UNCHANGED
        return self._update(link_id, lambda n: _link_with(n, favicon_path=path))

    def update_pinned_link_favicon_path(self, link_id: UUID, path: str | None) -> MutationResult:
        link = self._pinned_link(link_id)
        if link is None:
            return mutation.NOT_FOUND
        if link.favicon_path == path:
            return mutation.UNCHANGED
        link.favicon_path = path
        self._commit()
        return MutationResult.applied(link_id)

    def update_link_url(self, link_id: UUID, new_url: str) -> MutationResult:
        """Point a link at a new URL.  The cached favicon no longer applies and is cleared."""
        node = tree.find(self._items, link_id)
        if node is None:
            return mutation.NOT_FOUND
        if not isinstance(node, LinkNode):
            return mutation.INVALID_TARGET
        if node.link.url == new_url:
            return mutation.UNCHANGED
        return self._update(link_id, lambda n: _link_with(n, url=new_url, favicon_path=None))

    def update_link_title_if_default(self, link_id: UUID, new_title: str) -> MutationResult:
        """Replace a link's title only while it still carries its default title.

        Lets a late page-title fetch fill in a title without clobbering one
        the user has typed in the meantime.
        """
        trimmed = new_title.strip()
        if not trimmed:
            return mutation.UNCHANGED
        node = tree.find(self._items, link_id)
        if node is None:
            return mutation.NOT_FOUND
        if not isinstance(node, LinkNode):
            return mutation.INVALID_TARGET
        if node.link.title != default_title(node.link.url) or node.link.title == trimmed:
            return mutation.UNCHANGED
        result = self._update(link_id, lambda n: _link_with(n, title=trimmed))
        logger.debug("Updated title for {} -> {!r}", node.link.url, trimmed)
        return result

    def _update(self, node_id: UUID, mutator: tree.NodeMutator) -> MutationResult:
        if not tree.update(self._items, node_id, mutator):
            return mutation.UNCHANGED
        self._commit()
        return MutationResult.applied(node_id)

    # -- Nodes: delete / move --------------------------------------------------

    def delete_node(self, node_id: UUID) -> MutationResult:
        """Remove a node and, for folders, everything inside it."""
        if tree.remove(self._items, node_id) is None:
            return mutation.NOT_FOUND
        self._commit()
        return MutationResult.applied(node_id)

    def move_node(self, node_id: UUID, to_parent_id: UUID | None, index: int) -> MutationResult:
        """Move a node so it ends up at ``index`` among the children of ``to_parent_id``.

        ``to_parent_id`` None means the root.  ``index`` is the node's final
        position among its new siblings and is clamped to the valid range.
        Moving a folder into itself or any of its descendants is rejected.
        """
        items = self._items
        location = tree.locate(items, node_id)
        if location is None:
            return mutation.NOT_FOUND
        if to_parent_id is not None:
            if tree.is_descendant(items, to_parent_id, node_id):
                return mutation.WOULD_CREATE_CYCLE
            if tree.find_folder(items, to_parent_id) is None:
                return mutation.NOT_FOUND

        target = max(0, index)
        if location.parent_id == to_parent_id:
            sibling_count = len(self._siblings(to_parent_id))
            if min(target, sibling_count - 1) == location.index:
                return mutation.UNCHANGED

        node = tree.remove(items, node_id)
        if node is None:
            return mutation.NOT_FOUND
        tree.insert(items, node, to_parent_id, target)
        self._commit()
        return MutationResult.applied(node_id)

    def _siblings(self, parent_id: UUID | None) -> list[Node]:
        if parent_id is None:
            return self._items
        parent = tree.find_folder(self._items, parent_id)
        return parent.folder.children if parent is not None else []

    def move_node_to_workspace(self, node_id: UUID, workspace_id: UUID) -> MutationResult:
        """Move a node to the end of another workspace's root list."""
        return self.move_nodes_to_workspace([node_id], workspace_id)

    def move_nodes_to_workspace(self, node_ids: Iterable[UUID], workspace_id: UUID) -> MutationResult:
        """Move several nodes, in the given order, to the end of another workspace's root list."""
        current = self._workspaces.current
        if workspace_id == current.id:
            return mutation.INVALID_TARGET
        target = self._workspaces.get(workspace_id)
        if target is None:
            return mutation.NOT_FOUND

        moved = self._remove_all(current.items, node_ids)
        if not moved:
            return mutation.NOT_FOUND
        target.items.extend(moved)
        self._commit()
        return MutationResult.applied(workspace_id)

    def group_nodes(self, node_ids: Iterable[UUID], name: str) -> MutationResult:
        """Wrap the given nodes in a new expanded folder.

        The folder takes the place of the first listed node that exists; the
        nodes move into it in the order given.  The result's ``id`` is the new
        folder's id.
        """
        items = self._items
        node_ids = list(node_ids)
        locations = {node_id: tree.locate(items, node_id) for node_id in node_ids}
        anchor = next((loc for loc in locations.values() if loc is not None), None)
        if anchor is None:
            return mutation.NOT_FOUND

        grouped = self._remove_all(items, node_ids)
        if not grouped:
            return mutation.NOT_FOUND

        # Removed siblings that sat before the anchor shift its slot left.
        shift = sum(
            1
            for loc in locations.values()
            if loc is not None and loc.parent_id == anchor.parent_id and loc.index < anchor.index
        )
        parent_id: UUID | None = anchor.parent_id
        index: int | None = anchor.index - shift
        if parent_id is not None and tree.find_folder(items, parent_id) is None:
            # The anchor's parent was itself grouped; land at the end of the root.
            parent_id, index = None, None

        folder = make_folder(name, grouped)
        tree.insert(items, folder, parent_id, index)
        self._commit()
        logger.debug("Grouped {} node(s) into folder {!r}", len(grouped), name)
        return MutationResult.applied(folder.id)

    @staticmethod
    def _remove_all(items: list[Node], node_ids: Iterable[UUID]) -> list[Node]:
        removed = []
        for node_id in node_ids:
            node = tree.remove(items, node_id)
            if node is not None:
                removed.append(node)
        return removed

    # -- Pinned links ----------------------------------------------------------

    def pin_link(self, link_id: UUID) -> MutationResult:
        """Move a link from anywhere in the forest to the end of the pinned list."""
        workspace = self._workspaces.current
        node = tree.find(workspace.items, link_id)
        if node is None:
            return mutation.UNCHANGED if self._pinned_link(link_id) is not None else mutation.NOT_FOUND
        if not isinstance(node, LinkNode):
            return mutation.INVALID_TARGET
        if len(workspace.pinned_links) >= MAX_PINNED_LINKS:
            return mutation.LIMIT_EXCEEDED

        tree.remove(workspace.items, link_id)
        workspace.pinned_links.append(node.link)
        self._commit()
        return MutationResult.applied(link_id)

    def unpin_link(self, link_id: UUID) -> MutationResult:
        """Move a pinned link back to the end of the root list."""
        workspace = self._workspaces.current
        for index, link in enumerate(workspace.pinned_links):
            if link.id == link_id:
                workspace.pinned_links.pop(index)
                workspace.items.append(LinkNode(link=link))
                self._commit()
                return MutationResult.applied(link_id)
        return mutation.NOT_FOUND


# -- Node mutators -----------------------------------------------------------------


def _renamed(node: Node, name: str) -> Node:
    if isinstance(node, FolderNode):
        return FolderNode(folder=node.folder.model_copy(update={"name": name}))
    return _link_with(node, title=name)


def _link_with(node: Node, **changes: object) -> Node | None:
    if not isinstance(node, LinkNode):
        return None
    return LinkNode(link=node.link.model_copy(update=changes))
