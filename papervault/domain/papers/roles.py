"""
역할(Role) / 요청자(Actor) — 인증 collaborator가 채워서 넘긴다.

역할 분기는 transitions.py(전이표)와 scope.py(조회 범위) 두 곳에서만 한다.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    AUTHOR = "Author"
    SUBJECT_REVIEWER = "SubjectReviewer"
    BOARD_REVIEWER = "BoardReviewer"
    OVERSIGHT = "Oversight"
    DISTRIBUTOR = "Distributor"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """알 수 없는 값이면 None (예외 없음)."""
        if isinstance(value, Role):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


# 학과 단위로 범위가 고정되는 역할
DEPARTMENT_SCOPED_ROLES = (Role.SUBJECT_REVIEWER, Role.BOARD_REVIEWER)


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: Optional[Role]
    department_name: Optional[str] = None

    @property
    def role_name(self) -> Optional[str]:
        return self.role.value if self.role else None
