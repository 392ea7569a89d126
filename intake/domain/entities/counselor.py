"""Counselor entity — identity record of a staff member who can own tickets."""

from dataclasses import dataclass

from intake.domain.value_objects.enums import AccountStatus, CounselorRole

ROUTABLE_ROLES = frozenset({CounselorRole.COUNSELOR, CounselorRole.ADVISOR})


@dataclass
class Counselor:
    id: int | None
    name: str
    email: str
    role: CounselorRole = CounselorRole.COUNSELOR
    status: AccountStatus = AccountStatus.ACTIVE

    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def is_routable(self) -> bool:
        return self.is_active() and self.role in ROUTABLE_ROLES
