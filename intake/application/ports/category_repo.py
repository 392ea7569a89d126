"""Port interface for ticket-category routing configuration."""

from abc import ABC, abstractmethod

from intake.domain.entities.category import RoutingCategory


class CategoryRepository(ABC):
    @abstractmethod
    async def get_by_id(self, category_id: int) -> RoutingCategory | None:
        ...
