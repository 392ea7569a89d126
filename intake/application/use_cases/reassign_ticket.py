"""ReassignTicketUseCase — administrator assigns, transfers or unassigns a ticket."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from intake.application.ports.specialization_repo import SpecializationRepository
from intake.application.ports.workload_ledger import WorkloadLedger
from intake.application.use_cases.record_assignment import AssignmentRecorder
from intake.domain.errors import CapacityExceededError, NotSpecializedError
from intake.domain.value_objects.enums import AssignmentMethod, AssignmentType

logger = logging.getLogger(__name__)

DEFAULT_ASSIGN_REASON = "Manually assigned by admin"
DEFAULT_UNASSIGN_REASON = "Unassigned by admin"


@dataclass
class ReassignmentResult:
    ticket_id: int
    previous_assignee_id: int | None
    assignee_id: int | None
    assignment_type: AssignmentType
    assignment_method: AssignmentMethod
    assignment_reason: str
    audit_entry_id: int | None = None


class ReassignTicketUseCase:
    """Explicit reassignment using the same ledger and recorder as routing."""

    def __init__(
        self,
        specialization_repo: SpecializationRepository,
        ledger: WorkloadLedger,
        recorder: AssignmentRecorder,
    ):
        self._specializations = specialization_repo
        self._ledger = ledger
        self._recorder = recorder

    async def execute(
        self,
        ticket_id: int,
        category_id: int,
        current_assignee_id: int | None,
        new_assignee_id: int | None,
        actor_id: int | None,
        reason: str | None = None,
    ) -> ReassignmentResult:
        """Move a ticket to *new_assignee_id*, or unassign it when that is None.

        Capacity is taken on the new specialization before the old one is
        released, so a failed reservation leaves everything untouched.

        Raises:
            NotSpecializedError: new assignee has no available specialization
                for the category.
            CapacityExceededError: new assignee's specialization is full.
        """
        if new_assignee_id is not None and new_assignee_id == current_assignee_id:
            logger.info("Ticket %s already assigned to %s, nothing to do", ticket_id, new_assignee_id)
            return ReassignmentResult(
                ticket_id=ticket_id,
                previous_assignee_id=current_assignee_id,
                assignee_id=current_assignee_id,
                assignment_type=AssignmentType.MANUAL,
                assignment_method=AssignmentMethod.MANUAL,
                assignment_reason=reason or DEFAULT_ASSIGN_REASON,
            )

        if new_assignee_id is None:
            assignment_type = AssignmentType.UNASSIGN
            reason = reason or DEFAULT_UNASSIGN_REASON
        else:
            target = await self._specializations.get_for_counselor(new_assignee_id, category_id)
            if target is None or not target.is_available or not target.counselor_active:
                raise NotSpecializedError(new_assignee_id, category_id)
            if not await self._ledger.reserve(target.id):
                raise CapacityExceededError(target.id)
            assignment_type = (
                AssignmentType.TRANSFER if current_assignee_id is not None
                else AssignmentType.MANUAL
            )
            reason = reason or DEFAULT_ASSIGN_REASON

        if current_assignee_id is not None:
            previous = await self._specializations.get_for_counselor(current_assignee_id, category_id)
            if previous is not None:
                if not await self._ledger.release(previous.id):
                    logger.warning(
                        "Ticket %s: specialization %s was already at zero workload",
                        ticket_id, previous.id,
                    )

        audit_id = await self._recorder.record(
            ticket_id=ticket_id,
            previous_assignee_id=current_assignee_id,
            new_assignee_id=new_assignee_id,
            actor_id=actor_id,
            assignment_type=assignment_type,
            reason=reason,
        )

        logger.info(
            "Ticket %s: %s %s → %s by %s",
            ticket_id, assignment_type.value, current_assignee_id, new_assignee_id, actor_id,
        )
        return ReassignmentResult(
            ticket_id=ticket_id,
            previous_assignee_id=current_assignee_id,
            assignee_id=new_assignee_id,
            assignment_type=assignment_type,
            assignment_method=(
                AssignmentMethod.NONE if new_assignee_id is None else AssignmentMethod.MANUAL
            ),
            assignment_reason=reason,
            audit_entry_id=audit_id,
        )
