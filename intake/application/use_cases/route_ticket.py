"""RouteTicketUseCase — crisis scan → priority → counselor pick → reserve → log."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from intake.application.ports.category_repo import CategoryRepository
from intake.application.ports.specialization_repo import SpecializationRepository
from intake.application.ports.workload_ledger import WorkloadLedger
from intake.application.use_cases.detect_crisis import DetectCrisisUseCase
from intake.application.use_cases.record_assignment import AssignmentRecorder
from intake.domain.errors import UnknownCategoryError
from intake.domain.policies.counselor_selection import ScoredCandidate, select_best
from intake.domain.policies.crisis_detection import CrisisAssessment
from intake.domain.policies.priority_scoring import DEFAULT_CRISIS_BONUS, assess_priority
from intake.domain.value_objects.enums import (
    AssignmentMethod,
    AssignmentType,
    Priority,
    RoutingState,
)

logger = logging.getLogger(__name__)

REASON_ROUTING_DISABLED = "routing disabled for category"
REASON_NO_COUNSELOR = "no available counselor"


@dataclass
class RoutingRequest:
    ticket_id: int
    subject: str
    description: str
    category_id: int
    stated_priority: Priority = Priority.MEDIUM

    @property
    def text(self) -> str:
        return f"{self.subject} {self.description}".strip()


@dataclass
class RoutingResult:
    """Routing fields to be written onto the ticket by the intake caller."""

    ticket_id: int
    priority: Priority
    priority_score: int
    crisis_flag: bool
    assignment_reason: str
    state: RoutingState
    assignee_id: int | None = None
    specialization_id: int | None = None
    assignment_method: AssignmentMethod = AssignmentMethod.NONE
    matched_keywords: list[dict] = field(default_factory=list)
    audit_entry_id: int | None = None
    trace: list[RoutingState] = field(default_factory=list)

    @property
    def is_assigned(self) -> bool:
        return self.assignee_id is not None


class RouteTicketUseCase:
    """Runs one routing pass for a freshly created ticket.

    The pass must run in the same transaction as the ticket write so a
    failure after ``reserve`` rolls the counter back with everything else.
    """

    def __init__(
        self,
        category_repo: CategoryRepository,
        specialization_repo: SpecializationRepository,
        ledger: WorkloadLedger,
        detector: DetectCrisisUseCase,
        recorder: AssignmentRecorder,
        crisis_bonus: int = DEFAULT_CRISIS_BONUS,
        max_attempts: int = 0,
    ):
        self._categories = category_repo
        self._specializations = specialization_repo
        self._ledger = ledger
        self._detector = detector
        self._recorder = recorder
        self._crisis_bonus = crisis_bonus
        self._max_attempts = max_attempts

    async def execute(self, request: RoutingRequest) -> RoutingResult:
        """Route a single ticket.

        Pipeline:
        1. Crisis scan (only if the category enables it)
        2. Priority escalation + score
        3. Select the best counselor (only if the category auto-assigns)
        4. Reserve capacity; on a lost race exclude and select again
        5. Append assignment history (best-effort)

        Raises:
            UnknownCategoryError: the ticket references a category that does not exist.
        """
        category = await self._categories.get_by_id(request.category_id)
        if category is None:
            raise UnknownCategoryError(request.category_id)

        trace = [RoutingState.CREATED]

        # Step 1: crisis detection
        if category.crisis_detection_enabled:
            trace.append(RoutingState.DETECTING)
            assessment = await self._detector.execute(request.text, category.id)
        else:
            assessment = CrisisAssessment.empty()

        # Step 2: priority
        trace.append(RoutingState.SCORING)
        priority = assess_priority(
            request.stated_priority, assessment.is_crisis, self._crisis_bonus
        )
        if priority.escalated:
            logger.info(
                "Ticket %s: crisis language detected, priority %s → %s",
                request.ticket_id, priority.stated.value, priority.effective.value,
            )

        def finish_unassigned(reason: str) -> RoutingResult:
            trace.append(RoutingState.UNASSIGNED)
            logger.warning("Ticket %s left unassigned: %s", request.ticket_id, reason)
            return RoutingResult(
                ticket_id=request.ticket_id,
                priority=priority.effective,
                priority_score=priority.score,
                crisis_flag=assessment.is_crisis,
                matched_keywords=[m.as_dict() for m in assessment.matches],
                assignment_reason=reason,
                state=RoutingState.UNASSIGNED,
                trace=trace,
            )

        if not (category.auto_assign and category.is_active):
            return finish_unassigned(REASON_ROUTING_DISABLED)

        # Steps 3-4: select and reserve, retrying on lost races
        chosen = await self._select_and_reserve(request.ticket_id, category.id, trace)
        if chosen is None:
            return finish_unassigned(REASON_NO_COUNSELOR)

        spec = chosen.specialization
        reason = (
            f"Auto-assigned to {spec.counselor_name or spec.counselor_id} "
            f"(Priority: {spec.tier.value}, "
            f"Workload: {spec.current_workload}/{spec.max_workload})"
        )

        # Step 5: history
        trace.append(RoutingState.RECORDING)
        audit_id = await self._recorder.record(
            ticket_id=request.ticket_id,
            previous_assignee_id=None,
            new_assignee_id=spec.counselor_id,
            actor_id=None,
            assignment_type=AssignmentType.AUTO,
            reason=reason,
            criteria={
                "specialization_id": spec.id,
                "priority_level": spec.tier.value,
                "current_workload": spec.current_workload,
                "max_workload": spec.max_workload,
                "expertise_rating": spec.expertise_rating,
                "assignment_score": round(chosen.score, 2),
                "crisis_flag": assessment.is_crisis,
                "priority_score": priority.score,
            },
        )

        trace.append(RoutingState.DONE)
        logger.info(
            "Ticket %s → counselor %s (specialization %s, score %.2f, priority %s/%d)",
            request.ticket_id, spec.counselor_id, spec.id, chosen.score,
            priority.effective.value, priority.score,
        )
        return RoutingResult(
            ticket_id=request.ticket_id,
            priority=priority.effective,
            priority_score=priority.score,
            crisis_flag=assessment.is_crisis,
            matched_keywords=[m.as_dict() for m in assessment.matches],
            assignment_reason=reason,
            state=RoutingState.DONE,
            assignee_id=spec.counselor_id,
            specialization_id=spec.id,
            assignment_method=AssignmentMethod.AUTO,
            audit_entry_id=audit_id,
            trace=trace,
        )

    async def _select_and_reserve(
        self, ticket_id: int, category_id: int, trace: list[RoutingState]
    ) -> ScoredCandidate | None:
        """Loop SELECTING ⇄ RESERVING until a reservation sticks or nobody is left.

        The directory is re-read on every attempt so the scores reflect the
        workloads that other requests have committed in the meantime.
        """
        excluded: set[int] = set()
        attempts = 0
        while True:
            trace.append(RoutingState.SELECTING)
            candidates = await self._specializations.get_available_for_category(category_id)
            chosen = select_best(candidates, exclude=excluded)
            if chosen is None:
                return None

            trace.append(RoutingState.RESERVING)
            attempts += 1
            spec_id = chosen.specialization.id
            if await self._ledger.reserve(spec_id):
                return chosen

            logger.warning(
                "Ticket %s: lost capacity race on specialization %s (attempt %d)",
                ticket_id, spec_id, attempts,
            )
            excluded.add(spec_id)
            if self._max_attempts and attempts >= self._max_attempts:
                return None
