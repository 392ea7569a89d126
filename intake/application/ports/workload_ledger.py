"""Port interface for per-specialization workload accounting."""

from abc import ABC, abstractmethod

from intake.domain.entities.specialization import CounselorSpecialization


class WorkloadLedger(ABC):
    @abstractmethod
    async def reserve(self, specialization_id: int) -> bool:
        """Atomically add one ticket if current < max.

        Returns False when the slot is gone (capacity reached, possibly by a
        concurrent request). Must be a single conditional update or hold a
        row lock across check and write.
        """
        ...

    @abstractmethod
    async def release(self, specialization_id: int) -> bool:
        """Atomically remove one ticket, never going below zero.

        Returns False when the counter was already zero.
        """
        ...

    @abstractmethod
    async def get(self, specialization_id: int) -> CounselorSpecialization | None:
        ...
