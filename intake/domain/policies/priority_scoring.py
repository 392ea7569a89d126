"""PriorityScoringPolicy — numeric ranking score for triage ordering."""

from dataclasses import dataclass

from intake.domain.value_objects.enums import Priority

BASE_SCORES: dict[Priority, int] = {
    Priority.URGENT: 100,
    Priority.HIGH: 75,
    Priority.MEDIUM: 50,
    Priority.LOW: 25,
}

DEFAULT_CRISIS_BONUS = 50


@dataclass(frozen=True)
class PriorityAssessment:
    stated: Priority
    effective: Priority
    score: int

    @property
    def escalated(self) -> bool:
        return self.effective != self.stated


def priority_score(
    priority: Priority, crisis: bool, crisis_bonus: int = DEFAULT_CRISIS_BONUS
) -> int:
    """Base score of the tier plus a flat bonus when the text is a crisis."""
    return BASE_SCORES[priority] + (crisis_bonus if crisis else 0)


def assess_priority(
    stated: Priority, crisis: bool, crisis_bonus: int = DEFAULT_CRISIS_BONUS
) -> PriorityAssessment:
    """Escalate to Urgent on crisis, then score the effective priority.

    Crisis always wins over the submitter's choice, so every crisis ticket
    lands on the same score (Urgent + bonus).
    """
    effective = Priority.URGENT if crisis else stated
    return PriorityAssessment(
        stated=stated,
        effective=effective,
        score=priority_score(effective, crisis, crisis_bonus),
    )
