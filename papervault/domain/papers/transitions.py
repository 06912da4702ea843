"""
상태 전이표 — (Role, 현재 상태) → 허용 목표 상태 집합

표에 없는 조합은 IllegalTransition. 엔진은 이 표만 조회한다.
"""
from __future__ import annotations

from typing import Optional

from papervault.domain.papers.entities import PaperStatus
from papervault.domain.papers.roles import Role

S = PaperStatus

TRANSITIONS: dict[tuple[Role, PaperStatus], frozenset[PaperStatus]] = {
    # Author: 수정 요청 받은 시험지 재제출만
    (Role.AUTHOR, S.CORRECTION_REQUESTED): frozenset({S.SUBMITTED}),
    # 1차(과목 위원회)
    (Role.SUBJECT_REVIEWER, S.SUBMITTED): frozenset({S.SUBJECT_APPROVED, S.CORRECTION_REQUESTED}),
    # 2차(Board): 승인 시 scrutinized 파일 첨부 가능
    (Role.BOARD_REVIEWER, S.SUBJECT_APPROVED): frozenset({S.BOARD_APPROVED, S.CORRECTION_REQUESTED}),
    # Oversight: 잠금, 수정 요청, 한 단계 rollback
    (Role.OVERSIGHT, S.BOARD_APPROVED): frozenset({S.LOCKED, S.CORRECTION_REQUESTED, S.SUBJECT_APPROVED}),
    (Role.OVERSIGHT, S.SUBJECT_APPROVED): frozenset({S.SUBMITTED}),
    # 배포는 배포자별 원장에 기록
    (Role.DISTRIBUTOR, S.LOCKED): frozenset({S.DISTRIBUTED}),
}

# 새 문서를 동반할 수 있는 전이 (from, to)
DOCUMENT_TRANSITIONS: frozenset[tuple[PaperStatus, PaperStatus]] = frozenset({
    (S.CORRECTION_REQUESTED, S.SUBMITTED),
    (S.SUBJECT_APPROVED, S.BOARD_APPROVED),
})

# 문서 첨부 시 QP/Scheme 둘 다 필요한 전이 (scrutinized 교체)
PAIRED_DOCUMENT_TRANSITIONS: frozenset[tuple[PaperStatus, PaperStatus]] = frozenset({
    (S.SUBJECT_APPROVED, S.BOARD_APPROVED),
})

# Oversight 한 단계 되돌리기
ROLLBACK_TARGETS: dict[PaperStatus, PaperStatus] = {
    S.BOARD_APPROVED: S.SUBJECT_APPROVED,
    S.SUBJECT_APPROVED: S.SUBMITTED,
}

# 역할별 "승인" 목표 상태
APPROVE_TARGETS: dict[Role, PaperStatus] = {
    Role.SUBJECT_REVIEWER: S.SUBJECT_APPROVED,
    Role.BOARD_REVIEWER: S.BOARD_APPROVED,
}


def allowed_targets(role: Optional[Role], current: PaperStatus) -> frozenset[PaperStatus]:
    if role is None:
        return frozenset()
    return TRANSITIONS.get((role, current), frozenset())


def is_allowed(role: Optional[Role], current: PaperStatus, target: PaperStatus) -> bool:
    return target in allowed_targets(role, current)


def carries_documents(current: PaperStatus, target: PaperStatus) -> bool:
    return (current, target) in DOCUMENT_TRANSITIONS


def requires_document_pair(current: PaperStatus, target: PaperStatus) -> bool:
    return (current, target) in PAIRED_DOCUMENT_TRANSITIONS
