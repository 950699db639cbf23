"""Workspace and root application state models.

``AppState`` is the persisted root; see ``arcmark.core.codec`` for the
on-disk encoding and the defaults applied to older documents.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import Field

from arcmark.core.models.enums import WorkspaceColorId
from arcmark.core.models.nodes import CamelModel, Link, Node

MAX_PINNED_LINKS = 9
"""Per-workspace cap on ``pinned_links``."""

DEFAULT_WORKSPACE_NAME = "Inbox"

CURRENT_SCHEMA_VERSION = 1


class Workspace(CamelModel):
    """A named forest of bookmarks plus its pinned links."""

    id: UUID
    name: str
    color_id: WorkspaceColorId
    items: list[Node] = Field(description="Root forest")
    pinned_links: list[Link] = Field(
        default_factory=list,
        description="At most MAX_PINNED_LINKS entries; absent in documents written before pinning existed",
    )

    @classmethod
    def new(
        cls,
        name: str,
        color_id: WorkspaceColorId | None = None,
        items: list[Node] | None = None,
    ) -> Workspace:
        return cls(id=uuid4(), name=name, color_id=color_id or WorkspaceColorId.default(), items=items or [])

    @classmethod
    def default(cls) -> Workspace:
        return cls.new(DEFAULT_WORKSPACE_NAME)


class AppState(CamelModel):
    """Persisted root of the whole state graph."""

    schema_version: int
    workspaces: list[Workspace]
    selected_workspace_id: UUID | None = None
    is_settings_selected: bool = False

    @classmethod
    def default(cls) -> AppState:
        """Fresh state: one empty Inbox, selected."""
        workspace = Workspace.default()
        return cls(
            schema_version=CURRENT_SCHEMA_VERSION,
            workspaces=[workspace],
            selected_workspace_id=workspace.id,
        )
