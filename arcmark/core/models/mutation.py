"""Result type returned by every ``AppModel`` mutation."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from arcmark.core.models.enums import MutationStatus


@dataclass(frozen=True)
class MutationResult:
    """What a mutation did.

    Truthy only when the state changed.  ``id`` carries the id of whatever
    the call created (a node, folder or workspace), when it created one.
    """

    status: MutationStatus
    id: UUID | None = None

    def __bool__(self) -> bool:
        return self.status is MutationStatus.APPLIED

    @classmethod
    def applied(cls, id: UUID | None = None) -> MutationResult:  # noqa: A002
        return cls(MutationStatus.APPLIED, id)


UNCHANGED = MutationResult(MutationStatus.UNCHANGED)
NOT_FOUND = MutationResult(MutationStatus.NOT_FOUND)
WOULD_CREATE_CYCLE = MutationResult(MutationStatus.WOULD_CREATE_CYCLE)
LIMIT_EXCEEDED = MutationResult(MutationStatus.LIMIT_EXCEEDED)
LAST_ITEM_PROTECTED = MutationResult(MutationStatus.LAST_ITEM_PROTECTED)
INVALID_TARGET = MutationResult(MutationStatus.INVALID_TARGET)
