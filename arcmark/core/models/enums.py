"""Shared enumerations used across the bookmark core."""

from __future__ import annotations

import random
from enum import StrEnum

# -- Nodes -------------------------------------------------------------------


class NodeType(StrEnum):
    """Discriminator written next to every encoded node."""

    FOLDER = "folder"
    LINK = "link"


# -- Workspaces --------------------------------------------------------------


class WorkspaceColorId(StrEnum):
    """Workspace accent colour.  Raw values are persisted; display names are not."""

    EMBER = "ember"
    RUBY = "ruby"
    CORAL = "coral"
    TANGERINE = "tangerine"
    MOSS = "moss"
    OCEAN = "ocean"
    INDIGO = "indigo"
    GRAPHITE = "graphite"

    @property
    def display_name(self) -> str:
        return _COLOR_NAMES[self]

    @property
    def hex(self) -> str:
        return _COLOR_HEX[self]

    @classmethod
    def default(cls) -> WorkspaceColorId:
        return cls.EMBER

    @classmethod
    def random(cls) -> WorkspaceColorId:
        return random.choice(list(cls))  # noqa: S311


_COLOR_NAMES = {
    WorkspaceColorId.EMBER: "Blush",
    WorkspaceColorId.RUBY: "Apricot",
    WorkspaceColorId.CORAL: "Butter",
    WorkspaceColorId.TANGERINE: "Leaf",
    WorkspaceColorId.MOSS: "Mint",
    WorkspaceColorId.OCEAN: "Sky",
    WorkspaceColorId.INDIGO: "Periwinkle",
    WorkspaceColorId.GRAPHITE: "Lavender",
}

_COLOR_HEX = {
    WorkspaceColorId.EMBER: "#FFA2A2",
    WorkspaceColorId.RUBY: "#FFB86A",
    WorkspaceColorId.CORAL: "#FFF085",
    WorkspaceColorId.TANGERINE: "#D8F999",
    WorkspaceColorId.MOSS: "#5EE9B5",
    WorkspaceColorId.OCEAN: "#53EAFD",
    WorkspaceColorId.INDIGO: "#A3B3FF",
    WorkspaceColorId.GRAPHITE: "#DAB2FF",
}


class MoveDirection(StrEnum):
    LEFT = "left"
    RIGHT = "right"


# -- Mutations ---------------------------------------------------------------


class MutationStatus(StrEnum):
    """Outcome of an ``AppModel`` mutation.

    Only ``APPLIED`` means the state changed (and was persisted).  Every
    other value describes why the call was a no-op.
    """

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    WOULD_CREATE_CYCLE = "would_create_cycle"
    LIMIT_EXCEEDED = "limit_exceeded"
    LAST_ITEM_PROTECTED = "last_item_protected"
    INVALID_TARGET = "invalid_target"
