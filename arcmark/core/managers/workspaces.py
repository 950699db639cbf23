"""Workspace collection and selection.

Owns the ordered ``AppState.workspaces`` list and the current selection.
Knows nothing about trees: node edits inside a workspace go through
``arcmark.core.tree``.

Methods edit the shared ``AppState`` in place and report what happened as a
``MutationResult``; persisting and notifying is the caller's job (see
``AppModel``).  The one exception is the empty-collection safety net in
``current``, which has to persist on its own because it can fire from a
read.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import UUID

from loguru import logger

from arcmark.core.models import mutation
from arcmark.core.models.enums import MoveDirection, WorkspaceColorId
from arcmark.core.models.mutation import MutationResult
from arcmark.core.models.workspace import AppState, Workspace

if TYPE_CHECKING:
    from arcmark.core.store.base import StateStore


class WorkspaceStore:
    """Ordered workspaces plus the selected one.  Never empty once read."""

    def __init__(self, state: AppState, store: StateStore, on_heal: Callable[[], None] | None = None) -> None:
        self._state = state
        self._store = store
        self._on_heal = on_heal

    # -- Query -----------------------------------------------------------------

    @property
    def workspaces(self) -> list[Workspace]:
        return self._state.workspaces

    def get(self, workspace_id: UUID) -> Workspace | None:
        for workspace in self._state.workspaces:
            if workspace.id == workspace_id:
                return workspace
        return None

    def index_of(self, workspace_id: UUID) -> int | None:
        for index, workspace in enumerate(self._state.workspaces):
            if workspace.id == workspace_id:
                return index
        return None

    @property
    def current(self) -> Workspace:
        """The selected workspace, falling back to the first one.

        If there are no workspaces at all, a default Inbox is created,
        selected and persisted.
        """
        selected = self._state.selected_workspace_id
        if selected is not None:
            workspace = self.get(selected)
            if workspace is not None:
                return workspace
        if self._state.workspaces:
            return self._state.workspaces[0]
        return self._synthesize_default()

    def ensure_default(self) -> bool:
        """Create the default workspace if the collection is empty.  Returns whether it did."""
        if self._state.workspaces:
            return False
        self._synthesize_default()
        return True

    def _synthesize_default(self) -> Workspace:
        workspace = Workspace.default()
        logger.warning("No workspaces present, creating default workspace {}", workspace.id)
        self._state.workspaces = [workspace]
        self._state.selected_workspace_id = workspace.id
        self._state.is_settings_selected = False
        if self._on_heal is not None:
            self._on_heal()
        return workspace

    def restore_selection(self) -> None:
        """Apply the last-selected hint, then fall back to the first workspace."""
        if self._state.is_settings_selected:
            return
        hint = self._store.read_last_selected()
        if hint is not None and self.get(hint) is not None:
            self._state.selected_workspace_id = hint
        elif self._state.selected_workspace_id is not None and self.get(self._state.selected_workspace_id) is None:
            logger.debug("Selected workspace {} no longer exists", self._state.selected_workspace_id)
            self._state.selected_workspace_id = None
        if self._state.selected_workspace_id is None and self._state.workspaces:
            self._state.selected_workspace_id = self._state.workspaces[0].id

    # -- Selection -------------------------------------------------------------

    def select(self, workspace_id: UUID) -> MutationResult:
        if self.get(workspace_id) is None:
            return mutation.NOT_FOUND
        self._store.write_last_selected(workspace_id)
        if self._state.selected_workspace_id == workspace_id and not self._state.is_settings_selected:
            return mutation.UNCHANGED
        self._state.selected_workspace_id = workspace_id
        self._state.is_settings_selected = False
        return MutationResult.applied(workspace_id)

    def select_settings(self) -> MutationResult:
        if self._state.is_settings_selected:
            return mutation.UNCHANGED
        self._state.is_settings_selected = True
        self._state.selected_workspace_id = None
        return MutationResult.applied()

    # -- Mutation --------------------------------------------------------------

    def create(self, name: str, color_id: WorkspaceColorId | None = None) -> MutationResult:
        """Append a new empty workspace and select it."""
        workspace = Workspace.new(name, color_id)
        self._state.workspaces.append(workspace)
        self._state.selected_workspace_id = workspace.id
        self._state.is_settings_selected = False
        self._store.write_last_selected(workspace.id)
        return MutationResult.applied(workspace.id)

    def append(self, workspace: Workspace) -> None:
        """Append an already-built workspace without changing the selection."""
        self._state.workspaces.append(workspace)

    def rename(self, workspace_id: UUID, name: str) -> MutationResult:
        return self._update(workspace_id, _set_name(name))

    def set_color(self, workspace_id: UUID, color_id: WorkspaceColorId) -> MutationResult:
        return self._update(workspace_id, _set_color(color_id))

    def _update(self, workspace_id: UUID, mutate: Callable[[Workspace], bool]) -> MutationResult:
        workspace = self.get(workspace_id)
        if workspace is None:
            return mutation.NOT_FOUND
        if not mutate(workspace):
            return mutation.UNCHANGED
        return MutationResult.applied(workspace_id)

    def delete(self, workspace_id: UUID) -> MutationResult:
        """Remove a workspace unless it is the last one."""
        if len(self._state.workspaces) <= 1:
            return mutation.LAST_ITEM_PROTECTED
        index = self.index_of(workspace_id)
        if index is None:
            return mutation.NOT_FOUND

        del self._state.workspaces[index]
        if self._state.selected_workspace_id == workspace_id:
            new_id = self._state.workspaces[0].id
            self._state.selected_workspace_id = new_id
            self._store.write_last_selected(new_id)
        return MutationResult.applied(workspace_id)

    def reorder(self, workspace_id: UUID, direction: MoveDirection) -> MutationResult:
        """Swap with the adjacent workspace; no-op at either end."""
        index = self.index_of(workspace_id)
        if index is None:
            return mutation.NOT_FOUND
        target = index - 1 if direction is MoveDirection.LEFT else index + 1
        if not 0 <= target < len(self._state.workspaces):
            return mutation.INVALID_TARGET
        workspaces = self._state.workspaces
        workspaces[index], workspaces[target] = workspaces[target], workspaces[index]
        return MutationResult.applied(workspace_id)

    def move_to_index(self, workspace_id: UUID, to_index: int) -> MutationResult:
        index = self.index_of(workspace_id)
        if index is None:
            return mutation.NOT_FOUND
        if not 0 <= to_index < len(self._state.workspaces):
            return mutation.INVALID_TARGET
        if index == to_index:
            return mutation.UNCHANGED
        workspace = self._state.workspaces.pop(index)
        self._state.workspaces.insert(to_index, workspace)
        return MutationResult.applied(workspace_id)


# -- Field setters ---------------------------------------------------------------


def _set_name(name: str) -> Callable[[Workspace], bool]:
    def mutate(workspace: Workspace) -> bool:
        if workspace.name == name:
            return False
        workspace.name = name
        return True

    return mutate


def _set_color(color_id: WorkspaceColorId) -> Callable[[Workspace], bool]:
    def mutate(workspace: Workspace) -> bool:
        if workspace.color_id == color_id:
            return False
        workspace.color_id = color_id
        return True

    return mutate
