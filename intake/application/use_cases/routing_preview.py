"""Dry-run helpers for administrators: what would detection / routing do?"""

from __future__ import annotations

from dataclasses import dataclass, field

from intake.application.ports.category_repo import CategoryRepository
from intake.application.ports.specialization_repo import SpecializationRepository
from intake.application.use_cases.detect_crisis import DetectCrisisUseCase
from intake.domain.errors import UnknownCategoryError
from intake.domain.policies.counselor_selection import ScoredCandidate, rank_candidates
from intake.domain.policies.crisis_detection import CrisisAssessment, severity_breakdown
from intake.domain.value_objects.enums import Priority, Severity

IMMEDIATE_NOTIFICATION_SCORE = Severity.CRITICAL.weight


@dataclass
class DetectionPreview:
    text: str
    category_id: int | None
    assessment: CrisisAssessment

    @property
    def recommendation(self) -> str:
        if self.assessment.is_crisis:
            return "Immediate attention required"
        return "Normal processing"

    @property
    def suggested_priority(self) -> Priority:
        return Priority.URGENT if self.assessment.is_crisis else Priority.MEDIUM

    @property
    def immediate_notification(self) -> bool:
        return self.assessment.score >= IMMEDIATE_NOTIFICATION_SCORE

    def as_dict(self) -> dict:
        return {
            "text": self.text,
            "category_id": self.category_id,
            "detected_keywords": [m.as_dict() for m in self.assessment.matches],
            "crisis_score": self.assessment.score,
            "is_crisis": self.assessment.is_crisis,
            "recommendation": self.recommendation,
            "suggested_priority": self.suggested_priority.value,
            "immediate_notification": self.immediate_notification,
            "severity_breakdown": severity_breakdown(self.assessment),
        }


@dataclass
class AssignmentPreview:
    category_id: int
    category_name: str
    auto_assign: bool
    candidates: list[ScoredCandidate] = field(default_factory=list)

    @property
    def best(self) -> ScoredCandidate | None:
        return self.candidates[0] if self.candidates else None

    @property
    def message(self) -> str:
        if self.best is None:
            return "No counselors available for auto-assignment"
        spec = self.best.specialization
        return f"Auto-assignment would assign to {spec.counselor_name or spec.counselor_id}"

    def as_dict(self) -> dict:
        return {
            "category": {
                "id": self.category_id,
                "name": self.category_name,
                "auto_assign": self.auto_assign,
            },
            "best_counselor": self.best.as_dict() if self.best else None,
            "candidates": [c.as_dict() for c in self.candidates],
            "auto_assignment_would_work": self.auto_assign and self.best is not None,
            "message": self.message,
        }


class PreviewDetectionUseCase:
    """Runs detection without touching trigger counters."""

    def __init__(self, detector: DetectCrisisUseCase):
        self._detector = detector

    async def execute(self, text: str, category_id: int | None = None) -> DetectionPreview:
        assessment = await self._detector.execute(text, category_id, record=False)
        return DetectionPreview(text=text, category_id=category_id, assessment=assessment)


class PreviewAssignmentUseCase:
    """Ranks candidates for a category without reserving anything."""

    def __init__(
        self,
        category_repo: CategoryRepository,
        specialization_repo: SpecializationRepository,
    ):
        self._categories = category_repo
        self._specializations = specialization_repo

    async def execute(self, category_id: int) -> AssignmentPreview:
        category = await self._categories.get_by_id(category_id)
        if category is None:
            raise UnknownCategoryError(category_id)
        candidates = await self._specializations.get_available_for_category(category_id)
        return AssignmentPreview(
            category_id=category.id,
            category_name=category.name,
            auto_assign=category.auto_assign,
            candidates=rank_candidates(candidates),
        )
