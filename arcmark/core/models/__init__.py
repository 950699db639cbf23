"""Data models for the bookmark core."""

from arcmark.core.models.enums import (
    MoveDirection,
    MutationStatus,
    NodeType,
    WorkspaceColorId,
)
from arcmark.core.models.mutation import MutationResult
from arcmark.core.models.nodes import (
    Folder,
    FolderNode,
    Link,
    LinkNode,
    Node,
    NodeLocation,
    make_folder,
    make_link,
)
from arcmark.core.models.workspace import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_WORKSPACE_NAME,
    MAX_PINNED_LINKS,
    AppState,
    Workspace,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "DEFAULT_WORKSPACE_NAME",
    "MAX_PINNED_LINKS",
    # State
    "AppState",
    # Nodes
    "Folder",
    "FolderNode",
    "Link",
    "LinkNode",
    # Enums
    "MoveDirection",
    # Mutations
    "MutationResult",
    "MutationStatus",
    "Node",
    "NodeLocation",
    "NodeType",
    "Workspace",
    "WorkspaceColorId",
    "make_folder",
    "make_link",
]
