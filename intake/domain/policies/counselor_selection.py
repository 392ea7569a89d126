"""CounselorSelectionPolicy — rank specializations for a category."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from intake.domain.entities.specialization import (
    MAX_EXPERTISE,
    MIN_EXPERTISE,
    CounselorSpecialization,
)
from intake.domain.value_objects.enums import PriorityTier

TIER_WEIGHTS: dict[PriorityTier, int] = {
    PriorityTier.PRIMARY: 100,
    PriorityTier.SECONDARY: 50,
    PriorityTier.BACKUP: 25,
}
UNKNOWN_TIER_WEIGHT = 1


@dataclass(frozen=True)
class ScoredCandidate:
    specialization: CounselorSpecialization
    score: float

    def as_dict(self) -> dict:
        s = self.specialization
        return {
            "specialization_id": s.id,
            "counselor_id": s.counselor_id,
            "name": s.counselor_name,
            "priority_level": s.tier.value,
            "current_workload": s.current_workload,
            "max_workload": s.max_workload,
            "expertise_rating": s.expertise_rating,
            "assignment_score": round(self.score, 2),
            "workload_percentage": s.workload_percentage(),
        }


def tier_weight(tier: PriorityTier | None) -> int:
    return TIER_WEIGHTS.get(tier, UNKNOWN_TIER_WEIGHT)


def is_eligible(spec: CounselorSpecialization) -> bool:
    """Misconfigured rows (max <= 0, negative load, rating out of range) are
    simply not candidates."""
    if not spec.can_take_ticket():
        return False
    return MIN_EXPERTISE <= spec.expertise_rating <= MAX_EXPERTISE


def assignment_score(spec: CounselorSpecialization) -> float:
    """tier weight × headroom fraction × expertise fraction.

    Raises:
        ValueError: if the specialization has no usable capacity.
    """
    if spec.max_workload <= 0:
        raise ValueError(f"Specialization {spec.id} has max_workload={spec.max_workload}")
    workload_factor = 1 - spec.current_workload / spec.max_workload
    expertise_factor = spec.expertise_rating / MAX_EXPERTISE
    return tier_weight(spec.tier) * workload_factor * expertise_factor


def rank_candidates(
    specializations: list[CounselorSpecialization],
    exclude: Collection[int] = (),
) -> list[ScoredCandidate]:
    """Eligible candidates, best first.

    Order: score DESC, current workload ASC, specialization id ASC.
    """
    scored = [
        ScoredCandidate(specialization=s, score=assignment_score(s))
        for s in specializations
        if s.id not in exclude and is_eligible(s)
    ]
    scored.sort(
        key=lambda c: (
            -c.score,
            c.specialization.current_workload,
            c.specialization.id if c.specialization.id is not None else 0,
        )
    )
    return scored


def select_best(
    specializations: list[CounselorSpecialization],
    exclude: Collection[int] = (),
) -> ScoredCandidate | None:
    """Pick the single best candidate, or None when nobody can take the ticket.

    An empty result is a normal outcome, not an error.
    """
    ranked = rank_candidates(specializations, exclude)
    return ranked[0] if ranked else None
