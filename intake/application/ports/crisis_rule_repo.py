"""Port interface for the crisis keyword rule table."""

from abc import ABC, abstractmethod
from datetime import datetime

from intake.domain.entities.crisis_rule import CrisisRule


class CrisisRuleRepository(ABC):
    @abstractmethod
    async def get_active(self, category_id: int | None = None) -> list[CrisisRule]:
        """Active rules that are global or scoped to *category_id*."""
        ...

    @abstractmethod
    async def record_triggers(self, rule_ids: list[int], triggered_at: datetime) -> None:
        """Increment each rule's trigger counter once and stamp the time."""
        ...
