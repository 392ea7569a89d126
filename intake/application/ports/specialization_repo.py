"""Port interface for the counselor specialization directory."""

from abc import ABC, abstractmethod

from intake.domain.entities.specialization import CounselorSpecialization


class SpecializationRepository(ABC):
    @abstractmethod
    async def get_available_for_category(
        self, category_id: int
    ) -> list[CounselorSpecialization]:
        """Available specializations of routable counselors, capacity left or not."""
        ...

    @abstractmethod
    async def get_for_counselor(
        self, counselor_id: int, category_id: int
    ) -> CounselorSpecialization | None:
        ...
