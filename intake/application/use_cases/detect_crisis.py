"""DetectCrisisUseCase — run the rule table over ticket text, fail safe."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from intake.application.ports.crisis_rule_repo import CrisisRuleRepository
from intake.domain.policies.crisis_detection import (
    DEFAULT_CRISIS_THRESHOLD,
    CrisisAssessment,
    detect,
)

logger = logging.getLogger(__name__)


class DetectCrisisUseCase:
    """Loads the active rules once per call, scans, and records triggers."""

    def __init__(
        self,
        rule_repo: CrisisRuleRepository,
        threshold: int = DEFAULT_CRISIS_THRESHOLD,
    ):
        self._rules = rule_repo
        self._threshold = threshold

    async def execute(
        self, text: str, category_id: int | None = None, record: bool = True
    ) -> CrisisAssessment:
        """Assess *text* for crisis language.

        Args:
            text: subject and description joined.
            category_id: restricts category-scoped rules; global rules always apply.
            record: bump trigger counters of matched rules (off for previews).

        Returns:
            The assessment. If the rules cannot be loaded or evaluated, an empty
            non-crisis assessment is returned so ticket intake is never blocked.
            A failed trigger-counter write is logged and the assessment kept.
        """
        try:
            rules = await self._rules.get_active(category_id)
            assessment = detect(text, rules, category_id, threshold=self._threshold)
        except Exception:
            logger.warning(
                "Crisis detection failed for category %s, treating as no crisis",
                category_id,
                exc_info=True,
            )
            return CrisisAssessment.empty()

        if record and assessment.matches:
            rule_ids = [m.rule_id for m in assessment.matches if m.rule_id is not None]
            try:
                await self._rules.record_triggers(rule_ids, datetime.now(timezone.utc))
            except Exception:
                logger.warning(
                    "Could not record triggers for rules %s, keeping the assessment",
                    rule_ids,
                    exc_info=True,
                )

        if assessment.matches:
            logger.info(
                "Crisis scan: category=%s, score=%d, crisis=%s, keywords=%s",
                category_id, assessment.score, assessment.is_crisis, assessment.keywords,
            )
        return assessment
