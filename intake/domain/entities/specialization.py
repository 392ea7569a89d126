"""CounselorSpecialization entity — a counselor's capacity for one category."""

from dataclasses import dataclass
from datetime import datetime

from intake.domain.value_objects.enums import PriorityTier

MIN_EXPERTISE = 1.0
MAX_EXPERTISE = 5.0


@dataclass
class CounselorSpecialization:
    id: int | None
    counselor_id: int
    category_id: int
    tier: PriorityTier = PriorityTier.PRIMARY
    current_workload: int = 0
    max_workload: int = 10
    is_available: bool = True
    expertise_rating: float = MAX_EXPERTISE
    counselor_name: str = ""
    counselor_active: bool = True
    assigned_by: int | None = None
    assigned_at: datetime | None = None
    notes: str | None = None

    def is_at_capacity(self) -> bool:
        return self.current_workload >= self.max_workload

    def has_valid_capacity(self) -> bool:
        return self.max_workload > 0 and 0 <= self.current_workload

    def workload_percentage(self) -> float:
        if self.max_workload <= 0:
            return 0.0
        return round(self.current_workload / self.max_workload * 100, 1)

    def can_take_ticket(self) -> bool:
        return (
            self.is_available
            and self.counselor_active
            and self.has_valid_capacity()
            and not self.is_at_capacity()
        )
