"""
AccessScope Resolver — 역할/학과로 조회 가능 상태 + 필수 row filter 결정

조회 hot path에서 호출되므로 예외를 던지지 않는다.
역할을 모르면 빈 결과가 되는 가장 좁은 scope를 돌려준다.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from papervault.domain.papers.entities import PaperStatus
from papervault.domain.papers.roles import DEPARTMENT_SCOPED_ROLES, Actor, Role

ALL_STATUSES = frozenset(PaperStatus)


@dataclass(frozen=True)
class AccessScope:
    role: Optional[Role]
    allowed_statuses: frozenset[PaperStatus]
    mandatory_filters: tuple[tuple[str, Any], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.allowed_statuses

    def permits(self, paper) -> bool:
        """엔티티 1건이 이 scope 안에 있는지 (get() 판정용)."""
        if paper.status not in self.allowed_statuses:
            return False
        for field, value in self.mandatory_filters:
            if getattr(paper, field, None) != value:
                return False
        return True

    def row_scope(self) -> "AccessScope":
        """
        상태 제한을 풀고 필수 row filter(학과/작성자)만 남긴 scope.
        전이 대상 조회용: 상태 판정은 전이표가 한다. 빈 scope는 그대로.
        """
        if self.is_empty:
            return self
        return replace(self, allowed_statuses=ALL_STATUSES)

    def cache_token(self) -> str:
        role = self.role.value if self.role else "-"
        statuses = ",".join(sorted(s.value for s in self.allowed_statuses))
        filters = ",".join(f"{f}={v}" for f, v in self.mandatory_filters)
        return f"{role}|{statuses}|{filters}"


NO_ACCESS = AccessScope(role=None, allowed_statuses=frozenset())


def resolve_scope(actor: Optional[Actor]) -> AccessScope:
    if actor is None:
        return NO_ACCESS

    role = Role.parse(actor.role)
    if role is None:
        return NO_ACCESS

    if role == Role.AUTHOR:
        if not actor.user_id:
            return AccessScope(role=role, allowed_statuses=frozenset())
        return AccessScope(
            role=role,
            allowed_statuses=ALL_STATUSES,
            mandatory_filters=(("uploaded_by", actor.user_id),),
        )

    if role in DEPARTMENT_SCOPED_ROLES:
        department = (actor.department_name or "").strip()
        if not department:
            return AccessScope(role=role, allowed_statuses=frozenset())
        statuses = ALL_STATUSES
        if role == Role.BOARD_REVIEWER:
            # Board 큐에는 1차 검토 전(Submitted) 시험지를 보이지 않음
            statuses = ALL_STATUSES - {PaperStatus.SUBMITTED}
        return AccessScope(
            role=role,
            allowed_statuses=frozenset(statuses),
            mandatory_filters=(("department_name", department),),
        )

    if role == Role.OVERSIGHT:
        return AccessScope(role=role, allowed_statuses=ALL_STATUSES)

    if role == Role.DISTRIBUTOR:
        return AccessScope(
            role=role,
            allowed_statuses=frozenset({PaperStatus.LOCKED, PaperStatus.DISTRIBUTED}),
        )

    return NO_ACCESS
