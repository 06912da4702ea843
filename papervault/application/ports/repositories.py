"""
Repository 포트 — 영속화 추상화 (Django/ORM 미사용)

시험지 레코드를 직접 만지는 유일한 경로. 상태 필드 변경은
Status Transition Engine만 update_fields를 호출한다.
"""
from __future__ import annotations

from abc import abstractmethod
from datetime import date, datetime
from typing import Any, Optional, Protocol

from papervault.domain.papers.entities import ExamPaper, PaperDownload, PaperStatus
from papervault.domain.papers.query import PAGE_SIZE, PageResult, QueryDescriptor
from papervault.domain.papers.scope import AccessScope


class PaperRepository(Protocol):
    """시험지 조회/갱신. 트랜잭션(atomic)은 어댑터/UoW에서 수행."""

    @abstractmethod
    def get(self, paper_id: str, scope: Optional[AccessScope] = None) -> ExamPaper:
        """단건 조회. 없거나 scope 밖이면 PaperNotFound."""
        ...

    @abstractmethod
    def list(self, descriptor: QueryDescriptor, page_size: int = PAGE_SIZE) -> PageResult[ExamPaper]:
        """scope → filters → search 적용 후 최신순 페이지. total_count는 페이지 무관."""
        ...

    @abstractmethod
    def list_all(self, descriptor: QueryDescriptor) -> list[ExamPaper]:
        """페이지 없이 전체 (배포 보드처럼 묶은 뒤 페이지를 나누는 화면용)."""
        ...

    @abstractmethod
    def create(self, paper: ExamPaper) -> ExamPaper:
        """신규 insert. created_at/updated_at은 저장소가 채운다."""
        ...

    @abstractmethod
    def update_fields(
        self,
        paper_id: str,
        fields: dict[str, Any],
        expected_status: Optional[PaperStatus] = None,
    ) -> ExamPaper:
        """
        부분 갱신. expected_status가 있으면 상태 CAS:
        현재 상태가 다르면 IllegalTransition(reason="stale"), 행이 없으면 PaperNotFound.
        """
        ...

    @abstractmethod
    def status_counts(self, scope: AccessScope) -> dict[PaperStatus, int]:
        """scope 안의 상태별 건수 (대시보드)."""
        ...

    @abstractmethod
    def count_created_since(self, scope: AccessScope, since: datetime) -> int:
        """scope 안에서 since 이후 생성 건수."""
        ...


class DownloadLedger(Protocol):
    """배포 원장. (distributor, subject_code, exam_date) 유일성은 원장이 보장."""

    @abstractmethod
    def record(self, download: PaperDownload) -> PaperDownload:
        """원장 기록. 이미 있으면 AlreadyDistributed."""
        ...

    @abstractmethod
    def exists(self, distributor_id: str, subject_code: str, exam_date: date) -> bool:
        ...

    @abstractmethod
    def downloaded_subjects(self, distributor_id: str, exam_date: date) -> set[str]:
        """해당 날짜에 이 배포자가 이미 받은 과목 코드."""
        ...
