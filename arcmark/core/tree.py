"""Recursive operations over an ordered forest of nodes.

Every function takes a forest (a workspace's ``items`` or a folder's
``children``) and walks it depth-first, visiting a folder before its
children and short-circuiting on the first match.  Mutating functions edit
the given lists in place; callers that need isolation pass a copy.

Forests are small (tens to low hundreds of nodes), so there is no index:
each operation is a single O(n) traversal.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from uuid import UUID

from arcmark.core.models.nodes import FolderNode, LinkNode, Node, NodeLocation

NodeMutator = Callable[[Node], Node | None]
"""Receives the matched node; returns its replacement, or None to leave it untouched."""


# -- Queries -------------------------------------------------------------------


def find(forest: list[Node], node_id: UUID) -> Node | None:
    for node in forest:
        if node.id == node_id:
            return node
        if isinstance(node, FolderNode):
            found = find(node.folder.children, node_id)
            if found is not None:
                return found
    return None


def find_folder(forest: list[Node], folder_id: UUID) -> FolderNode | None:
    node = find(forest, folder_id)
    return node if isinstance(node, FolderNode) else None


def find_link(forest: list[Node], link_id: UUID) -> LinkNode | None:
    node = find(forest, link_id)
    return node if isinstance(node, LinkNode) else None


def locate(forest: list[Node], node_id: UUID, parent_id: UUID | None = None) -> NodeLocation | None:
    """Return where ``node_id`` sits: its parent folder id (None at root) and index."""
    for index, node in enumerate(forest):
        if node.id == node_id:
            return NodeLocation(parent_id=parent_id, index=index)
        if isinstance(node, FolderNode):
            location = locate(node.folder.children, node_id, parent_id=node.id)
            if location is not None:
                return location
    return None


def is_descendant(forest: list[Node], node_id: UUID, of_id: UUID) -> bool:
    """True iff ``node_id`` is ``of_id`` itself or anywhere inside its subtree."""
    ancestor = find(forest, of_id)
    if ancestor is None:
        return False
    return _contains(ancestor, node_id)


def _contains(node: Node, node_id: UUID) -> bool:
    if node.id == node_id:
        return True
    if isinstance(node, FolderNode):
        return any(_contains(child, node_id) for child in node.folder.children)
    return False


def walk(forest: list[Node]) -> Iterator[Node]:
    """Yield every node, depth-first, folders before their children."""
    for node in forest:
        yield node
        if isinstance(node, FolderNode):
            yield from walk(node.folder.children)


def count_nodes(forest: list[Node]) -> tuple[int, int]:
    """Return ``(links, folders)`` across the whole forest."""
    links = folders = 0
    for node in walk(forest):
        if isinstance(node, FolderNode):
            folders += 1
        else:
            links += 1
    return links, folders


# -- Mutations -----------------------------------------------------------------


def insert(forest: list[Node], node: Node, parent_id: UUID | None = None, index: int | None = None) -> bool:
    """Insert ``node`` at ``index`` among the root nodes or a folder's children.

    ``index`` is clamped to ``[0, len(siblings)]``; None appends.  Returns
    False, leaving the forest untouched, when ``parent_id`` names no folder.
    """
    if parent_id is None:
        _insert_at(forest, node, index)
        return True

    parent = find_folder(forest, parent_id)
    if parent is None:
        return False
    _insert_at(parent.folder.children, node, index)
    return True


def _insert_at(siblings: list[Node], node: Node, index: int | None) -> None:
    if index is None:
        siblings.append(node)
    else:
        siblings.insert(max(0, min(index, len(siblings))), node)


def remove(forest: list[Node], node_id: UUID) -> Node | None:
    """Splice ``node_id`` out of the forest at any depth and return it."""
    for index, node in enumerate(forest):
        if node.id == node_id:
            return forest.pop(index)
        if isinstance(node, FolderNode):
            removed = remove(node.folder.children, node_id)
            if removed is not None:
                return removed
    return None


def update(forest: list[Node], node_id: UUID, mutator: NodeMutator) -> bool:
    """Replace ``node_id`` with ``mutator(node)``.  Returns whether a replacement happened."""
    for index, node in enumerate(forest):
        if node.id == node_id:
            replacement = mutator(node)
            if replacement is None:
                return False
            forest[index] = replacement
            return True
        if isinstance(node, FolderNode) and update(node.folder.children, node_id, mutator):
            return True
    return False
