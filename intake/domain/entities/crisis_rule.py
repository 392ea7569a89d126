"""CrisisRule entity — one administrator-managed keyword in the detection table."""

from dataclasses import dataclass
from datetime import datetime

from intake.domain.value_objects.enums import MatchMode, Severity


@dataclass
class CrisisRule:
    id: int | None
    keyword: str
    severity: Severity
    match_mode: MatchMode = MatchMode.PARTIAL
    case_sensitive: bool = False
    category_id: int | None = None  # None = global
    is_active: bool = True
    trigger_count: int = 0
    last_triggered_at: datetime | None = None

    @property
    def weight(self) -> int:
        return self.severity.weight

    def is_global(self) -> bool:
        return self.category_id is None

    def applies_to(self, category_id: int | None) -> bool:
        """Active and scoped either globally or to the given category."""
        if not self.is_active:
            return False
        return self.is_global() or self.category_id == category_id
