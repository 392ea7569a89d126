"""RoutingCategory — the slice of ticket-category config the router reads."""

from dataclasses import dataclass

from intake.domain.value_objects.enums import Priority


@dataclass(frozen=True)
class RoutingCategory:
    id: int
    name: str
    auto_assign: bool = True
    crisis_detection_enabled: bool = True
    sla_response_hours: int = 24
    max_priority_level: int = Priority.HIGH.level
    is_active: bool = True
