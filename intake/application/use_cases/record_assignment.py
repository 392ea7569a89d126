"""AssignmentRecorder — best-effort append to the assignment history log."""

from __future__ import annotations

import logging

from intake.application.ports.assignment_history_repo import AssignmentHistoryRepository
from intake.domain.entities.assignment_history import AssignmentHistoryEntry
from intake.domain.value_objects.enums import AssignmentType

logger = logging.getLogger(__name__)


class AssignmentRecorder:
    """A failed history write is logged and the routing decision stands."""

    def __init__(self, history_repo: AssignmentHistoryRepository):
        self._history = history_repo

    async def record(
        self,
        ticket_id: int,
        previous_assignee_id: int | None,
        new_assignee_id: int | None,
        actor_id: int | None,
        assignment_type: AssignmentType,
        reason: str,
        criteria: dict | None = None,
    ) -> int | None:
        """Append one entry. Returns its id, or None if the write failed."""
        entry = AssignmentHistoryEntry(
            ticket_id=ticket_id,
            previous_assignee_id=previous_assignee_id,
            new_assignee_id=new_assignee_id,
            actor_id=actor_id,
            assignment_type=assignment_type,
            reason=reason,
            criteria=criteria or {},
        )
        try:
            saved = await self._history.append(entry)
        except Exception:
            logger.warning(
                "Could not record %s assignment history for ticket %s",
                assignment_type.value, ticket_id,
                exc_info=True,
            )
            return None

        logger.info(
            "Ticket %s: history #%s recorded (%s → %s, type=%s)",
            ticket_id, saved.id, previous_assignee_id, new_assignee_id,
            assignment_type.value,
        )
        return saved.id
