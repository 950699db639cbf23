"""Search filtering over a node forest."""

from __future__ import annotations

from arcmark.core.models.nodes import FolderNode, LinkNode, Node


def filter_nodes(forest: list[Node], query: str) -> list[Node]:
    """Return a new forest holding only links whose title contains ``query``.

    Matching is a case-insensitive substring test on link titles.  A folder
    survives, expanded and with its children pruned to the matches, only if
    something beneath it matches; its own name is not considered.  The
    source forest is never modified.
    """
    needle = query.lower()
    return _filter(forest, needle)


def _filter(forest: list[Node], needle: str) -> list[Node]:
    result: list[Node] = []
    for node in forest:
        if isinstance(node, LinkNode):
            if needle in node.link.title.lower():
                result.append(node.model_copy(deep=True))
            continue
        children = _filter(node.folder.children, needle)
        if children:
            folder = node.folder.model_copy(update={"children": children, "is_expanded": True})
            result.append(FolderNode(folder=folder))
    return result
