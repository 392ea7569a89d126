"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"

    @property
    def level(self) -> int:
        """Ordinal used by category caps: 1=Low … 4=Urgent."""
        return _PRIORITY_LEVELS[self]


_PRIORITY_LEVELS = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        return _SEVERITY_WEIGHTS[self]


_SEVERITY_WEIGHTS = {
    Severity.LOW: 1,
    Severity.MEDIUM: 10,
    Severity.HIGH: 100,
    Severity.CRITICAL: 1000,
}


class MatchMode(str, Enum):
    EXACT = "exact"      # plain substring
    PARTIAL = "partial"  # keyword must start at a word boundary


class PriorityTier(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    BACKUP = "backup"


class CounselorRole(str, Enum):
    STUDENT = "student"
    COUNSELOR = "counselor"
    ADVISOR = "advisor"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class AssignmentType(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    TRANSFER = "transfer"
    UNASSIGN = "unassign"


class AssignmentMethod(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    NONE = "none"


class RoutingState(str, Enum):
    CREATED = "created"
    DETECTING = "detecting"
    SCORING = "scoring"
    SELECTING = "selecting"
    RESERVING = "reserving"
    RECORDING = "recording"
    DONE = "done"
    UNASSIGNED = "unassigned"
