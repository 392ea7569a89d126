"""SQLAlchemy repository implementations."""

from __future__ import annotations

import dataclasses
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from intake.adapters.persistence.models import (
    AssignmentHistoryModel,
    CounselorModel,
    CounselorSpecializationModel,
    CrisisRuleModel,
    TicketCategoryModel,
)
from intake.application.ports.assignment_history_repo import AssignmentHistoryRepository
from intake.application.ports.category_repo import CategoryRepository
from intake.application.ports.counselor_repo import CounselorRepository
from intake.application.ports.crisis_rule_repo import CrisisRuleRepository
from intake.application.ports.specialization_repo import SpecializationRepository
from intake.application.ports.workload_ledger import WorkloadLedger
from intake.domain.entities.assignment_history import AssignmentHistoryEntry
from intake.domain.entities.category import RoutingCategory
from intake.domain.entities.counselor import ROUTABLE_ROLES, Counselor
from intake.domain.entities.crisis_rule import CrisisRule
from intake.domain.entities.specialization import CounselorSpecialization
from intake.domain.value_objects.enums import (
    AccountStatus,
    AssignmentType,
    CounselorRole,
    MatchMode,
    PriorityTier,
    Severity,
)

# ─── Mappers ─────────────────────────────────────────────────────────


def _category_to_domain(m: TicketCategoryModel) -> RoutingCategory:
    return RoutingCategory(
        id=m.id,
        name=m.name,
        auto_assign=m.auto_assign,
        crisis_detection_enabled=m.crisis_detection_enabled,
        sla_response_hours=m.sla_response_hours,
        max_priority_level=m.max_priority_level,
        is_active=m.is_active,
    )


def _counselor_to_domain(m: CounselorModel) -> Counselor:
    return Counselor(
        id=m.id,
        name=m.name,
        email=m.email,
        role=CounselorRole(m.role),
        status=AccountStatus(m.status),
    )


def _specialization_to_domain(
    m: CounselorSpecializationModel, counselor: CounselorModel | None = None
) -> CounselorSpecialization:
    return CounselorSpecialization(
        id=m.id,
        counselor_id=m.counselor_id,
        category_id=m.category_id,
        tier=PriorityTier(m.priority_level),
        current_workload=m.current_workload,
        max_workload=m.max_workload,
        is_available=m.is_available,
        expertise_rating=float(m.expertise_rating),
        counselor_name=counselor.name if counselor else "",
        counselor_active=(
            counselor.status == AccountStatus.ACTIVE.value if counselor else True
        ),
        assigned_by=m.assigned_by,
        assigned_at=m.assigned_at,
        notes=m.notes,
    )


def _rule_to_domain(m: CrisisRuleModel) -> CrisisRule:
    return CrisisRule(
        id=m.id,
        keyword=m.keyword,
        severity=Severity(m.severity_level),
        match_mode=MatchMode(m.match_mode),
        case_sensitive=m.case_sensitive,
        category_id=m.category_id,
        is_active=m.is_active,
        trigger_count=m.trigger_count,
        last_triggered_at=m.last_triggered_at,
    )


def _history_to_domain(m: AssignmentHistoryModel) -> AssignmentHistoryEntry:
    return AssignmentHistoryEntry(
        id=m.id,
        ticket_id=m.ticket_id,
        previous_assignee_id=m.assigned_from,
        new_assignee_id=m.assigned_to,
        actor_id=m.assigned_by,
        assignment_type=AssignmentType(m.assignment_type),
        reason=m.reason or "",
        criteria=m.assignment_criteria or {},
        assigned_at=m.assigned_at,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlCategoryRepository(CategoryRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, category_id: int) -> RoutingCategory | None:
        m = await self._s.get(TicketCategoryModel, category_id)
        return _category_to_domain(m) if m else None


class SqlCounselorRepository(CounselorRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, counselor_id: int) -> Counselor | None:
        m = await self._s.get(CounselorModel, counselor_id)
        return _counselor_to_domain(m) if m else None


class SqlSpecializationRepository(SpecializationRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_available_for_category(
        self, category_id: int
    ) -> list[CounselorSpecialization]:
        # populate_existing: a retry after a lost race must see fresh workloads,
        # not the identity-map copy from the previous attempt.
        result = await self._s.execute(
            select(CounselorSpecializationModel, CounselorModel)
            .join(CounselorModel, CounselorSpecializationModel.counselor_id == CounselorModel.id)
            .where(
                CounselorSpecializationModel.category_id == category_id,
                CounselorSpecializationModel.is_available.is_(True),
                CounselorModel.status == AccountStatus.ACTIVE.value,
                CounselorModel.role.in_([r.value for r in ROUTABLE_ROLES]),
            )
            .order_by(CounselorSpecializationModel.id)
            .execution_options(populate_existing=True)
        )
        return [_specialization_to_domain(spec, counselor) for spec, counselor in result.all()]

    async def get_for_counselor(
        self, counselor_id: int, category_id: int
    ) -> CounselorSpecialization | None:
        result = await self._s.execute(
            select(CounselorSpecializationModel, CounselorModel)
            .join(CounselorModel, CounselorSpecializationModel.counselor_id == CounselorModel.id)
            .where(
                CounselorSpecializationModel.counselor_id == counselor_id,
                CounselorSpecializationModel.category_id == category_id,
            )
            .execution_options(populate_existing=True)
        )
        row = result.one_or_none()
        return _specialization_to_domain(row[0], row[1]) if row else None


class SqlWorkloadLedger(WorkloadLedger):
    """Conditional UPDATEs: the database checks and writes in one statement,
    so concurrent requests can never both take the last slot."""

    def __init__(self, session: AsyncSession):
        self._s = session

    async def reserve(self, specialization_id: int) -> bool:
        result = await self._s.execute(
            update(CounselorSpecializationModel)
            .where(
                CounselorSpecializationModel.id == specialization_id,
                CounselorSpecializationModel.is_available.is_(True),
                CounselorSpecializationModel.current_workload
                < CounselorSpecializationModel.max_workload,
            )
            .values(current_workload=CounselorSpecializationModel.current_workload + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release(self, specialization_id: int) -> bool:
        result = await self._s.execute(
            update(CounselorSpecializationModel)
            .where(
                CounselorSpecializationModel.id == specialization_id,
                CounselorSpecializationModel.current_workload > 0,
            )
            .values(current_workload=CounselorSpecializationModel.current_workload - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def get(self, specialization_id: int) -> CounselorSpecialization | None:
        result = await self._s.execute(
            select(CounselorSpecializationModel, CounselorModel)
            .join(CounselorModel, CounselorSpecializationModel.counselor_id == CounselorModel.id)
            .where(CounselorSpecializationModel.id == specialization_id)
            .execution_options(populate_existing=True)
        )
        row = result.one_or_none()
        return _specialization_to_domain(row[0], row[1]) if row else None


class SqlCrisisRuleRepository(CrisisRuleRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_active(self, category_id: int | None = None) -> list[CrisisRule]:
        scope = CrisisRuleModel.category_id.is_(None)
        if category_id is not None:
            scope = or_(scope, CrisisRuleModel.category_id == category_id)
        result = await self._s.execute(
            select(CrisisRuleModel)
            .where(CrisisRuleModel.is_active.is_(True), scope)
            .order_by(CrisisRuleModel.id)
        )
        return [_rule_to_domain(m) for m in result.scalars()]

    async def record_triggers(self, rule_ids: list[int], triggered_at: datetime) -> None:
        if not rule_ids:
            return
        # Savepoint: a failed counter bump must not abort the ticket transaction.
        async with self._s.begin_nested():
            await self._s.execute(
                update(CrisisRuleModel)
                .where(CrisisRuleModel.id.in_(rule_ids))
                .values(
                    trigger_count=CrisisRuleModel.trigger_count + 1,
                    last_triggered_at=triggered_at,
                )
                .execution_options(synchronize_session=False)
            )


class SqlAssignmentHistoryRepository(AssignmentHistoryRepository):
    """Insert-only: entries are never updated or deleted."""

    def __init__(self, session: AsyncSession):
        self._s = session

    async def append(self, entry: AssignmentHistoryEntry) -> AssignmentHistoryEntry:
        m = AssignmentHistoryModel(
            ticket_id=entry.ticket_id,
            assigned_from=entry.previous_assignee_id,
            assigned_to=entry.new_assignee_id,
            assigned_by=entry.actor_id,
            assignment_type=entry.assignment_type.value,
            reason=entry.reason,
            assignment_criteria=entry.criteria or None,
            assigned_at=entry.assigned_at,
        )
        async with self._s.begin_nested():
            self._s.add(m)
            await self._s.flush()
        return dataclasses.replace(entry, id=m.id)

    async def get_by_ticket(self, ticket_id: int) -> list[AssignmentHistoryEntry]:
        result = await self._s.execute(
            select(AssignmentHistoryModel)
            .where(AssignmentHistoryModel.ticket_id == ticket_id)
            .order_by(AssignmentHistoryModel.assigned_at, AssignmentHistoryModel.id)
        )
        return [_history_to_domain(m) for m in result.scalars()]
