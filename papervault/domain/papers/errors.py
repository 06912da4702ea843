"""
시험지 도메인 오류 — 순수 파이썬

호출부는 타입으로 분기한다. 표시(toast/banner)는 외부 책임.
"""
from __future__ import annotations

from typing import Iterable, Optional


class PaperDomainError(Exception):
    """시험지 도메인 규칙 위반 등."""
    pass


class ValidationError(PaperDomainError):
    """잘못된 filter/page/전이 요청. 재시도 대상 아님."""
    pass


class PaperNotFound(PaperDomainError):
    """id 없음 또는 scope 밖. 권한 없는 scope에 존재 여부를 노출하지 않음."""

    def __init__(self, paper_id: str) -> None:
        super().__init__(f"Paper not found: {paper_id}")
        self.paper_id = paper_id


class IllegalTransition(PaperDomainError):
    """역할/현재 상태에서 허용되지 않는 상태 변경 (stale CAS 포함)."""

    def __init__(
        self,
        role: Optional[str],
        current: Optional[str],
        target: str,
        allowed: Iterable[str] = (),
        reason: str = "not_allowed",
    ) -> None:
        self.role = role
        self.current = current
        self.target = target
        self.allowed = tuple(sorted(allowed))
        self.reason = reason
        super().__init__(
            f"Illegal transition {current} -> {target} for role={role} "
            f"(reason={reason}, allowed={list(self.allowed)})"
        )


class StorageUploadError(PaperDomainError):
    """QP 또는 Scheme 업로드 실패. 같은 호출에서 올린 파일은 이미 보상 삭제됨."""

    def __init__(self, document: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to upload {document}")
        self.document = document
        self.cause = cause


class PersistenceError(PaperDomainError):
    """파일 업로드 후 DB 기록 실패. 새로 올린 파일은 이미 보상 삭제됨."""
    pass


class TransientUnavailable(PaperDomainError):
    """네트워크/서비스 장애. 재시도 가능 (자동 재시도는 호출부 정책)."""
    pass


class AlreadyDistributed(PaperDomainError):
    """(distributor, subject_code, exam_date) 조합으로 이미 배포됨."""
    pass
