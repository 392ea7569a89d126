"""AssignmentHistoryEntry — one immutable line of a ticket's assignment log."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from intake.domain.value_objects.enums import AssignmentType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AssignmentHistoryEntry:
    ticket_id: int
    previous_assignee_id: int | None
    new_assignee_id: int | None
    actor_id: int | None  # None = system
    assignment_type: AssignmentType
    reason: str
    criteria: dict = field(default_factory=dict)
    assigned_at: datetime = field(default_factory=_utcnow)
    id: int | None = None

    def was_automatic(self) -> bool:
        return self.assignment_type == AssignmentType.AUTO

    def describe(self) -> str:
        by = f"user {self.actor_id}" if self.actor_id is not None else "system"
        if self.assignment_type == AssignmentType.UNASSIGN:
            return f"Unassigned from {self.previous_assignee_id} by {by}"
        if self.previous_assignee_id is not None:
            return (
                f"Transferred from {self.previous_assignee_id} "
                f"to {self.new_assignee_id} by {by}"
            )
        return f"Assigned to {self.new_assignee_id} by {by}"
