"""
역할별 목록 조회 Use Case — scope 결정 → descriptor → 캐시 → repository

- list_papers: 역할별 시험지 목록 (Author/Reviewer/Oversight 공통)
- distribution_board: 시험일 기준 Locked/Distributed 시험지를 과목별 행으로 묶어 페이지
- list_scheme_papers: 배포 완료 시험지의 채점기준(Scheme) 목록
- dashboard_stats: 상태별 집계
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from papervault.application.ports.repositories import DownloadLedger, PaperRepository
from papervault.application.use_cases.papers.query_cache import PaginatedQueryCache
from papervault.domain.papers.entities import PENDING_REVIEW_STATUSES, PaperStatus
from papervault.domain.papers.grouping import SubjectGroup, group_papers_by_subject
from papervault.domain.papers.query import (
    PAGE_SIZE,
    VIEW_DISTRIBUTION_BOARD,
    VIEW_LIST,
    PageResult,
    QueryDescriptor,
    build_query,
    page_bounds,
)
from papervault.domain.papers.roles import Actor
from papervault.domain.papers.scope import resolve_scope

WEEKLY_GROWTH_DAYS = 7


def make_paper_fetcher(
    repository: PaperRepository,
    page_size: int = PAGE_SIZE,
) -> Callable[[QueryDescriptor], PageResult]:
    """PaginatedQueryCache용 fetch 함수. view에 따라 repository 호출 방식이 다름."""

    def fetch(descriptor: QueryDescriptor) -> PageResult:
        if descriptor.view == VIEW_DISTRIBUTION_BOARD:
            papers = repository.list_all(descriptor)
            groups = group_papers_by_subject(papers)
            start, end = page_bounds(descriptor.page, page_size)
            return PageResult(items=groups[start:end], total_count=len(groups))
        return repository.list(descriptor, page_size=page_size)

    return fetch


@dataclass(frozen=True)
class DashboardStats:
    total_papers: int
    pending_review: int
    approved: int
    distributed: int
    weekly_growth: int


class PaperQueryService:

    def __init__(
        self,
        cache: PaginatedQueryCache,
        repository: PaperRepository,
        ledger: Optional[DownloadLedger] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._cache = cache
        self._repository = repository
        self._ledger = ledger
        self._clock = clock

    def list_papers(
        self,
        actor: Actor,
        filters: Optional[Iterable[Any]] = None,
        search: Optional[str] = "",
        page: Any = 1,
    ) -> PageResult:
        descriptor = build_query(resolve_scope(actor), filters=filters, search=search, page=page)
        return self._cache.get(descriptor)

    def get_paper(self, actor: Actor, paper_id: str):
        """단건. scope 밖이면 PaperNotFound (캐시 미사용)."""
        return self._repository.get(paper_id, scope=resolve_scope(actor))

    def list_scheme_papers(self, actor: Actor, page: Any = 1) -> PageResult:
        filters = [{"field": "status", "value": PaperStatus.DISTRIBUTED.value}]
        descriptor = build_query(resolve_scope(actor), filters=filters, page=page, view=VIEW_LIST)
        return self._cache.get(descriptor)

    def distribution_board(
        self,
        actor: Actor,
        exam_date: Optional[date] = None,
        filters: Optional[Iterable[Any]] = None,
        search: Optional[str] = "",
        page: Any = 1,
    ) -> PageResult[SubjectGroup]:
        """
        시험일(기본: 오늘) 과목별 행. downloaded 플래그는 요청자 기준 원장에서 채운다
        (캐시 엔트리는 배포자와 무관하게 공유).
        """
        day = exam_date or self._clock().date()
        all_filters = list(filters or [])
        all_filters.append({"field": "exam_date", "value": day})
        descriptor = build_query(
            resolve_scope(actor),
            filters=all_filters,
            search=search,
            page=page,
            view=VIEW_DISTRIBUTION_BOARD,
        )
        result = self._cache.get(descriptor)

        downloaded: set[str] = set()
        if self._ledger is not None:
            downloaded = self._ledger.downloaded_subjects(actor.user_id, day)
        rows = [replace(row, downloaded=row.subject_code in downloaded) for row in result.items]
        return PageResult(items=rows, total_count=result.total_count)

    def dashboard_stats(self, actor: Actor) -> DashboardStats:
        scope = resolve_scope(actor)
        counts = self._repository.status_counts(scope)
        since = self._clock() - timedelta(days=WEEKLY_GROWTH_DAYS)
        return DashboardStats(
            total_papers=sum(counts.values()),
            pending_review=sum(counts.get(s, 0) for s in PENDING_REVIEW_STATUSES),
            approved=counts.get(PaperStatus.BOARD_APPROVED, 0),
            distributed=counts.get(PaperStatus.DISTRIBUTED, 0),
            weekly_growth=self._repository.count_created_since(scope, since),
        )
