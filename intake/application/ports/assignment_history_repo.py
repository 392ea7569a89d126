"""Port interface for the append-only assignment history log."""

from abc import ABC, abstractmethod

from intake.domain.entities.assignment_history import AssignmentHistoryEntry


class AssignmentHistoryRepository(ABC):
    @abstractmethod
    async def append(self, entry: AssignmentHistoryEntry) -> AssignmentHistoryEntry:
        """Persist the entry and return it with its id set."""
        ...

    @abstractmethod
    async def get_by_ticket(self, ticket_id: int) -> list[AssignmentHistoryEntry]:
        """Entries for one ticket, oldest first."""
        ...
