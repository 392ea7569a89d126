"""Tests for the detection and assignment dry-run use cases."""

from __future__ import annotations

import pytest

from intake.application.use_cases.detect_crisis import DetectCrisisUseCase
from intake.application.use_cases.routing_preview import (
    PreviewAssignmentUseCase,
    PreviewDetectionUseCase,
)
from intake.domain.entities.category import RoutingCategory
from intake.domain.entities.specialization import CounselorSpecialization
from intake.domain.errors import UnknownCategoryError
from intake.domain.value_objects.enums import Priority, PriorityTier
from tests.unit.application.fakes import (
    FakeCategoryRepo,
    FakeRuleRepo,
    FakeSpecializationRepo,
    SpecializationStore,
)


@pytest.mark.asyncio
async def test_detection_preview_does_not_bump_counters(default_rules, crisis_text):
    rules = FakeRuleRepo(default_rules)
    uc = PreviewDetectionUseCase(DetectCrisisUseCase(rules))

    preview = await uc.execute(crisis_text)

    assert preview.assessment.is_crisis
    assert preview.recommendation == "Immediate attention required"
    assert preview.suggested_priority == Priority.URGENT
    assert preview.immediate_notification
    assert all(r.trigger_count == 0 for r in rules.rules.values())


@pytest.mark.asyncio
async def test_detection_preview_normal_text(default_rules):
    uc = PreviewDetectionUseCase(DetectCrisisUseCase(FakeRuleRepo(default_rules)))

    preview = await uc.execute("a bit stressed about grades", category_id=2)
    data = preview.as_dict()

    assert data["is_crisis"] is False
    assert data["crisis_score"] == 1
    assert data["recommendation"] == "Normal processing"
    assert data["suggested_priority"] == "Medium"
    assert data["immediate_notification"] is False
    assert data["severity_breakdown"]["low"]["keywords"] == ["stressed"]


@pytest.mark.asyncio
async def test_high_severity_crisis_without_immediate_notification(default_rules):
    uc = PreviewDetectionUseCase(DetectCrisisUseCase(FakeRuleRepo(default_rules)))

    preview = await uc.execute("past self-harm")

    assert preview.assessment.is_crisis
    assert not preview.immediate_notification


@pytest.mark.asyncio
async def test_assignment_preview_ranks_without_reserving():
    store = SpecializationStore([
        CounselorSpecialization(id=1, counselor_id=10, category_id=1,
                                current_workload=8, counselor_name="Ana"),
        CounselorSpecialization(id=2, counselor_id=20, category_id=1,
                                tier=PriorityTier.SECONDARY, counselor_name="Ben"),
    ])
    uc = PreviewAssignmentUseCase(
        FakeCategoryRepo([RoutingCategory(id=1, name="Mental Health")]),
        FakeSpecializationRepo(store),
    )

    preview = await uc.execute(1)
    data = preview.as_dict()

    assert preview.best.specialization.id == 2
    assert data["message"] == "Auto-assignment would assign to Ben"
    assert data["auto_assignment_would_work"] is True
    assert [c["specialization_id"] for c in data["candidates"]] == [2, 1]
    assert store.workload(2) == 0


@pytest.mark.asyncio
async def test_assignment_preview_empty_category():
    uc = PreviewAssignmentUseCase(
        FakeCategoryRepo([RoutingCategory(id=1, name="Mental Health", auto_assign=False)]),
        FakeSpecializationRepo(SpecializationStore([])),
    )

    data = (await uc.execute(1)).as_dict()

    assert data["best_counselor"] is None
    assert data["auto_assignment_would_work"] is False
    assert data["message"] == "No counselors available for auto-assignment"


@pytest.mark.asyncio
async def test_assignment_preview_unknown_category():
    uc = PreviewAssignmentUseCase(
        FakeCategoryRepo([]), FakeSpecializationRepo(SpecializationStore([]))
    )
    with pytest.raises(UnknownCategoryError):
        await uc.execute(5)
