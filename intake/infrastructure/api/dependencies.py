"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from intake.adapters.persistence.database import get_session
from intake.adapters.persistence.repositories import (
    SqlAssignmentHistoryRepository,
    SqlCategoryRepository,
    SqlCrisisRuleRepository,
    SqlSpecializationRepository,
    SqlWorkloadLedger,
)
from intake.application.use_cases.detect_crisis import DetectCrisisUseCase
from intake.application.use_cases.reassign_ticket import ReassignTicketUseCase
from intake.application.use_cases.record_assignment import AssignmentRecorder
from intake.application.use_cases.route_ticket import RouteTicketUseCase
from intake.application.use_cases.routing_preview import (
    PreviewAssignmentUseCase,
    PreviewDetectionUseCase,
)
from intake.config import settings

# Re-export session dependency
get_db_session = get_session


def get_workload_ledger(session: AsyncSession = Depends(get_session)) -> SqlWorkloadLedger:
    return SqlWorkloadLedger(session)


def get_history_repo(
    session: AsyncSession = Depends(get_session),
) -> SqlAssignmentHistoryRepository:
    return SqlAssignmentHistoryRepository(session)


def _detector(session: AsyncSession) -> DetectCrisisUseCase:
    return DetectCrisisUseCase(
        rule_repo=SqlCrisisRuleRepository(session),
        threshold=settings.crisis_score_threshold,
    )


def get_route_ticket_uc(
    session: AsyncSession = Depends(get_session),
) -> RouteTicketUseCase:
    return RouteTicketUseCase(
        category_repo=SqlCategoryRepository(session),
        specialization_repo=SqlSpecializationRepository(session),
        ledger=SqlWorkloadLedger(session),
        detector=_detector(session),
        recorder=AssignmentRecorder(SqlAssignmentHistoryRepository(session)),
        crisis_bonus=settings.crisis_priority_bonus,
        max_attempts=settings.routing_max_attempts,
    )


def get_reassign_ticket_uc(
    session: AsyncSession = Depends(get_session),
) -> ReassignTicketUseCase:
    return ReassignTicketUseCase(
        specialization_repo=SqlSpecializationRepository(session),
        ledger=SqlWorkloadLedger(session),
        recorder=AssignmentRecorder(SqlAssignmentHistoryRepository(session)),
    )


def get_preview_detection_uc(
    session: AsyncSession = Depends(get_session),
) -> PreviewDetectionUseCase:
    return PreviewDetectionUseCase(detector=_detector(session))


def get_preview_assignment_uc(
    session: AsyncSession = Depends(get_session),
) -> PreviewAssignmentUseCase:
    return PreviewAssignmentUseCase(
        category_repo=SqlCategoryRepository(session),
        specialization_repo=SqlSpecializationRepository(session),
    )
