"""Routing endpoints — called in-process by ticket intake and by admins."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from intake.adapters.persistence.repositories import (
    SqlAssignmentHistoryRepository,
    SqlWorkloadLedger,
)
from intake.application.use_cases.reassign_ticket import ReassignTicketUseCase
from intake.application.use_cases.route_ticket import RouteTicketUseCase, RoutingRequest
from intake.application.use_cases.routing_preview import (
    PreviewAssignmentUseCase,
    PreviewDetectionUseCase,
)
from intake.domain.errors import CapacityExceededError, NotSpecializedError, UnknownCategoryError
from intake.domain.value_objects.enums import Priority
from intake.infrastructure.api.dependencies import (
    get_history_repo,
    get_preview_assignment_uc,
    get_preview_detection_uc,
    get_reassign_ticket_uc,
    get_route_ticket_uc,
    get_workload_ledger,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routing", tags=["routing"])


class RouteTicketBody(BaseModel):
    subject: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=10000)
    category_id: int
    priority: Priority = Priority.MEDIUM


class ReassignBody(BaseModel):
    category_id: int
    current_assignee_id: int | None = None
    assigned_to: int | None = None
    actor_id: int | None = None
    reason: str | None = Field(default=None, max_length=500)


class DetectionTestBody(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    category_id: int | None = None


@router.post("/tickets/{ticket_id}")
async def route_ticket(
    ticket_id: int,
    body: RouteTicketBody,
    uc: RouteTicketUseCase = Depends(get_route_ticket_uc),
):
    """Run the intake routing pass for a newly created ticket."""
    try:
        result = await uc.execute(
            RoutingRequest(
                ticket_id=ticket_id,
                subject=body.subject,
                description=body.description,
                category_id=body.category_id,
                stated_priority=body.priority,
            )
        )
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "ticket_id": result.ticket_id,
        "assigned_to": result.assignee_id,
        "specialization_id": result.specialization_id,
        "priority": result.priority.value,
        "priority_score": result.priority_score,
        "crisis_flag": result.crisis_flag,
        "detected_crisis_keywords": result.matched_keywords,
        "auto_assigned": result.assignment_method.value,
        "assignment_reason": result.assignment_reason,
        "audit_entry_id": result.audit_entry_id,
        "state": result.state.value,
        "trace": [s.value for s in result.trace],
    }


@router.post("/tickets/{ticket_id}/assignment")
async def reassign_ticket(
    ticket_id: int,
    body: ReassignBody,
    uc: ReassignTicketUseCase = Depends(get_reassign_ticket_uc),
):
    """Manually assign, transfer or unassign a ticket."""
    try:
        result = await uc.execute(
            ticket_id=ticket_id,
            category_id=body.category_id,
            current_assignee_id=body.current_assignee_id,
            new_assignee_id=body.assigned_to,
            actor_id=body.actor_id,
            reason=body.reason,
        )
    except NotSpecializedError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except CapacityExceededError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {
        "ticket_id": result.ticket_id,
        "assigned_from": result.previous_assignee_id,
        "assigned_to": result.assignee_id,
        "assignment_type": result.assignment_type.value,
        "auto_assigned": result.assignment_method.value,
        "assignment_reason": result.assignment_reason,
        "audit_entry_id": result.audit_entry_id,
    }


@router.get("/tickets/{ticket_id}/history")
async def ticket_history(
    ticket_id: int,
    repo: SqlAssignmentHistoryRepository = Depends(get_history_repo),
):
    """Assignment history for one ticket, oldest first."""
    entries = await repo.get_by_ticket(ticket_id)
    return {
        "ticket_id": ticket_id,
        "total": len(entries),
        "history": [
            {
                "id": e.id,
                "assigned_from": e.previous_assignee_id,
                "assigned_to": e.new_assignee_id,
                "assigned_by": e.actor_id,
                "assignment_type": e.assignment_type.value,
                "reason": e.reason,
                "description": e.describe(),
                "assignment_criteria": e.criteria,
                "assigned_at": e.assigned_at.isoformat() if e.assigned_at else None,
            }
            for e in entries
        ],
    }


@router.post("/crisis-rules/test")
async def test_crisis_detection(
    body: DetectionTestBody,
    uc: PreviewDetectionUseCase = Depends(get_preview_detection_uc),
):
    """Dry-run crisis detection; trigger counters are left alone."""
    preview = await uc.execute(body.text, body.category_id)
    return preview.as_dict()


@router.get("/categories/{category_id}/preview")
async def preview_assignment(
    category_id: int,
    uc: PreviewAssignmentUseCase = Depends(get_preview_assignment_uc),
):
    """Which counselor would auto-assignment pick right now?"""
    try:
        preview = await uc.execute(category_id)
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return preview.as_dict()


@router.post("/specializations/{specialization_id}/release")
async def release_workload(
    specialization_id: int,
    ledger: SqlWorkloadLedger = Depends(get_workload_ledger),
):
    """Give back one unit of workload when a ticket is resolved or closed."""
    released = await ledger.release(specialization_id)
    spec = await ledger.get(specialization_id)
    if spec is None:
        raise HTTPException(status_code=404, detail="Specialization not found")
    if not released:
        logger.info("Specialization %s already at zero workload", specialization_id)
    return {
        "specialization_id": specialization_id,
        "released": released,
        "current_workload": spec.current_workload,
        "max_workload": spec.max_workload,
    }
