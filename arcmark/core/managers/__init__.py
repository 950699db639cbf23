"""State managers for the bookmark core.

``WorkspaceStore`` owns the workspace collection and selection;
``AppModel`` layers the node tree operations and cross-cutting rules on
top and is the only thing callers should mutate state through.  Managers
report rejected or stale edits as ``MutationResult`` values, never as
exceptions.
"""

from arcmark.core.managers.app_model import AppModel, default_title
from arcmark.core.managers.workspaces import WorkspaceStore

__all__ = ["AppModel", "WorkspaceStore", "default_title"]
