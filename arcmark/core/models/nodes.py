"""Bookmark tree data model.

A forest is an ordered ``list[Node]``; a ``Node`` is the closed union of
``FolderNode`` and ``LinkNode``.  Each variant wraps its payload under a key
named after the discriminator, which is exactly the persisted shape::

    {"type": "folder", "folder": {"id": ..., "name": ..., "isExpanded": true, "children": [...]}}
    {"type": "link", "link": {"id": ..., "title": ..., "url": ..., "faviconPath": null}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from arcmark.core.models.enums import NodeType


class CamelModel(BaseModel):
    """Base for persisted models: snake_case in Python, camelCase on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- Payloads ----------------------------------------------------------------


class Link(CamelModel):
    id: UUID
    title: str
    url: str
    favicon_path: str | None = None


class Folder(CamelModel):
    id: UUID
    name: str
    children: list[Node] = Field(description="Ordered exactly as the user arranged them")
    is_expanded: bool


# -- Union variants ----------------------------------------------------------


class FolderNode(BaseModel):
    type: Literal[NodeType.FOLDER] = NodeType.FOLDER
    folder: Folder

    @property
    def id(self) -> UUID:
        return self.folder.id

    @property
    def display_name(self) -> str:
        return self.folder.name


class LinkNode(BaseModel):
    type: Literal[NodeType.LINK] = NodeType.LINK
    link: Link

    @property
    def id(self) -> UUID:
        return self.link.id

    @property
    def display_name(self) -> str:
        return self.link.title


Node = Annotated[FolderNode | LinkNode, Field(discriminator="type")]

Folder.model_rebuild()


# -- Construction helpers ----------------------------------------------------


def make_folder(
    name: str,
    children: list[Node] | None = None,
    *,
    is_expanded: bool = True,
    id: UUID | None = None,  # noqa: A002
) -> FolderNode:
    folder = Folder(id=id or uuid4(), name=name, children=children or [], is_expanded=is_expanded)
    return FolderNode(folder=folder)


def make_link(
    url: str,
    title: str,
    *,
    favicon_path: str | None = None,
    id: UUID | None = None,  # noqa: A002
) -> LinkNode:
    link = Link(id=id or uuid4(), title=title, url=url, favicon_path=favicon_path)
    return LinkNode(link=link)


# -- Derived values ----------------------------------------------------------


@dataclass(frozen=True)
class NodeLocation:
    """Position of a node: ``parent_id`` is None for root-level nodes."""

    parent_id: UUID | None
    index: int
