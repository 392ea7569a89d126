"""Port interface for counselor identity lookup."""

from abc import ABC, abstractmethod

from intake.domain.entities.counselor import Counselor


class CounselorRepository(ABC):
    @abstractmethod
    async def get_by_id(self, counselor_id: int) -> Counselor | None:
        ...
