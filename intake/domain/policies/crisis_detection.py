"""CrisisDetectionPolicy — literal keyword matching against the rule table."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from intake.domain.entities.crisis_rule import CrisisRule
from intake.domain.value_objects.enums import MatchMode, Severity

# One high-severity hit, or an accumulation of medium hits.
DEFAULT_CRISIS_THRESHOLD = 100


@dataclass(frozen=True)
class CrisisMatch:
    rule_id: int | None
    keyword: str
    severity: Severity
    weight: int
    category_id: int | None = None

    def as_dict(self) -> dict:
        return {
            "id": self.rule_id,
            "keyword": self.keyword,
            "severity_level": self.severity.value,
            "severity_weight": self.weight,
            "category_id": self.category_id,
        }


@dataclass(frozen=True)
class CrisisAssessment:
    """Result of scanning one ticket's text."""

    matches: tuple[CrisisMatch, ...] = field(default_factory=tuple)
    score: int = 0
    is_crisis: bool = False

    @classmethod
    def empty(cls) -> CrisisAssessment:
        return cls()

    @property
    def keywords(self) -> list[str]:
        return [m.keyword for m in self.matches]

    def has_critical(self) -> bool:
        return any(m.severity == Severity.CRITICAL for m in self.matches)


def rule_matches(rule: CrisisRule, text: str) -> bool:
    """Check a single rule against text.

    EXACT rules are a substring test. PARTIAL rules must match a whole word
    (or phrase), so "ass" does not fire inside "assassinate".
    """
    keyword = rule.keyword
    if not keyword:
        return False

    if rule.match_mode == MatchMode.EXACT:
        if rule.case_sensitive:
            return keyword in text
        return keyword.casefold() in text.casefold()

    flags = 0 if rule.case_sensitive else re.IGNORECASE
    # Keywords may end in punctuation ("help?"), where \b would not match.
    pattern = r"(?<!\w)" + re.escape(keyword) + r"(?!\w)"
    return re.search(pattern, text, flags) is not None


def is_crisis_level(matches: list[CrisisMatch] | tuple[CrisisMatch, ...], threshold: int) -> bool:
    score = sum(m.weight for m in matches)
    return any(m.severity == Severity.CRITICAL for m in matches) or score >= threshold


def detect(
    text: str,
    rules: list[CrisisRule],
    category_id: int | None = None,
    threshold: int = DEFAULT_CRISIS_THRESHOLD,
) -> CrisisAssessment:
    """Pure function: scan text with every applicable rule.

    Rules that are inactive or scoped to another category are skipped.
    Matches come back heaviest first, ties by rule id, so the same text and
    rule set always produce the same assessment.

    Raises whatever a malformed rule raises; callers that must not fail wrap
    this (see DetectCrisisUseCase).
    """
    if not text:
        return CrisisAssessment.empty()

    matches = [
        CrisisMatch(
            rule_id=rule.id,
            keyword=rule.keyword,
            severity=rule.severity,
            weight=rule.weight,
            category_id=rule.category_id,
        )
        for rule in rules
        if rule.applies_to(category_id) and rule_matches(rule, text)
    ]
    matches.sort(key=lambda m: (-m.weight, m.rule_id if m.rule_id is not None else 0))

    return CrisisAssessment(
        matches=tuple(matches),
        score=sum(m.weight for m in matches),
        is_crisis=is_crisis_level(matches, threshold),
    )


def severity_breakdown(assessment: CrisisAssessment) -> dict[str, dict]:
    """Group matches per severity tier, heaviest tier first."""
    breakdown: dict[str, dict] = {}
    for severity in sorted(Severity, key=lambda s: -s.weight):
        hits = [m for m in assessment.matches if m.severity == severity]
        breakdown[severity.value] = {
            "count": len(hits),
            "keywords": [m.keyword for m in hits],
            "total_weight": sum(m.weight for m in hits),
        }
    return breakdown
