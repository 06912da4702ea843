"""
공통 fixture — 포트 in-memory 구현 (Django/R2 없이 Use Case 테스트)
"""
from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from papervault.adapters.cache.memory_store import InMemoryPageCacheStore
from papervault.application.ports.storage import IObjectStorage, StorageError
from papervault.application.use_cases.papers.file_transaction import FileTransactionManager
from papervault.application.use_cases.papers.queries import PaperQueryService, make_paper_fetcher
from papervault.application.use_cases.papers.query_cache import PaginatedQueryCache
from papervault.application.use_cases.papers.status_transition import StatusTransitionEngine
from papervault.domain.papers.entities import (
    ExamPaper,
    PaperDownload,
    PaperDraft,
    PaperStatus,
    UploadedDocument,
)
from papervault.domain.papers.errors import (
    AlreadyDistributed,
    IllegalTransition,
    PaperNotFound,
)
from papervault.domain.papers.query import PAGE_SIZE, PageResult, QueryDescriptor, page_bounds
from papervault.domain.papers.roles import Actor, Role
from papervault.domain.papers.scope import AccessScope

BUCKET = "papers-test"
PUBLIC_BASE = "https://cdn.test.local"
DEPARTMENT = "Computer Science"


# ---------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------

class FakeObjectStorage(IObjectStorage):
    """키 → bytes. fail_put/fail_head/fail_delete 패턴이 키에 포함되면 StorageError."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.puts: list[str] = []
        self.deletes: list[str] = []
        self.fail_put: set[str] = set()
        self.fail_delete: set[str] = set()
        self.fail_head: set[str] = set()

    def _matches(self, key: str, patterns: set[str]) -> bool:
        return any(p in key for p in patterns)

    def put_object(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        if self._matches(key, self.fail_put):
            raise StorageError(f"put failed: {key}")
        self.puts.append(key)
        self.objects[key] = data

    def object_exists(self, bucket: str, key: str) -> bool:
        if self._matches(key, self.fail_head):
            raise StorageError(f"head failed: {key}")
        return key in self.objects

    def delete_object(self, bucket: str, key: str) -> None:
        if self._matches(key, self.fail_delete):
            raise StorageError(f"delete failed: {key}")
        self.deletes.append(key)
        self.objects.pop(key, None)

    def public_url(self, bucket: str, key: str) -> str:
        return f"{PUBLIC_BASE}/{key}"


# ---------------------------------------------------------------------
# Repository / Ledger / UoW
# ---------------------------------------------------------------------

def _value(v: Any) -> Any:
    return v.value if isinstance(v, PaperStatus) else v


class InMemoryPaperRepository:

    def __init__(self) -> None:
        self.rows: dict[str, ExamPaper] = {}
        self.fail_update: Optional[Exception] = None
        self.fail_create: Optional[Exception] = None
        self.list_calls: list[QueryDescriptor] = []

    def _in_scope(self, paper: ExamPaper, scope: Optional[AccessScope]) -> bool:
        return scope is None or scope.permits(paper)

    def _matching(self, descriptor: QueryDescriptor) -> list[ExamPaper]:
        rows = [p for p in self.rows.values() if self._in_scope(p, descriptor.scope)]
        for f in descriptor.filters:
            rows = [p for p in rows if _value(getattr(p, f.field)) == _value(f.value)]
        if descriptor.search:
            needle = descriptor.search.lower()
            rows = [p for p in rows if needle in p.subject_code.lower()]
        rows.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return rows

    def get(self, paper_id: str, scope: Optional[AccessScope] = None) -> ExamPaper:
        paper = self.rows.get(paper_id)
        if paper is None or not self._in_scope(paper, scope):
            raise PaperNotFound(paper_id)
        return paper

    def list(self, descriptor: QueryDescriptor, page_size: int = PAGE_SIZE) -> PageResult:
        self.list_calls.append(descriptor)
        rows = self._matching(descriptor)
        start, end = page_bounds(descriptor.page, page_size)
        return PageResult(items=rows[start:end], total_count=len(rows))

    def list_all(self, descriptor: QueryDescriptor) -> list[ExamPaper]:
        self.list_calls.append(descriptor)
        return self._matching(descriptor)

    def create(self, paper: ExamPaper) -> ExamPaper:
        if self.fail_create is not None:
            raise self.fail_create
        self.rows[paper.id] = paper
        return paper

    def update_fields(
        self,
        paper_id: str,
        fields: dict[str, Any],
        expected_status: Optional[PaperStatus] = None,
    ) -> ExamPaper:
        if self.fail_update is not None:
            raise self.fail_update
        paper = self.rows.get(paper_id)
        if paper is None:
            raise PaperNotFound(paper_id)
        if expected_status is not None and paper.status != expected_status:
            raise IllegalTransition(None, paper.status.value, _value(fields.get("status")), reason="stale")
        updated = replace(paper, **fields)
        self.rows[paper_id] = updated
        return updated

    def status_counts(self, scope: AccessScope) -> dict[PaperStatus, int]:
        counts: dict[PaperStatus, int] = {}
        for p in self.rows.values():
            if self._in_scope(p, scope):
                counts[p.status] = counts.get(p.status, 0) + 1
        return counts

    def count_created_since(self, scope: AccessScope, since: datetime) -> int:
        return sum(
            1 for p in self.rows.values()
            if self._in_scope(p, scope) and p.created_at is not None and p.created_at >= since
        )


class InMemoryDownloadLedger:

    def __init__(self) -> None:
        self.rows: list[PaperDownload] = []

    def record(self, download: PaperDownload) -> PaperDownload:
        if self.exists(download.distributor_id, download.subject_code, download.exam_date):
            raise AlreadyDistributed(download.subject_code)
        self.rows.append(download)
        return download

    def exists(self, distributor_id: str, subject_code: str, exam_date: date) -> bool:
        return any(
            r.distributor_id == distributor_id
            and r.subject_code == subject_code
            and r.exam_date == exam_date
            for r in self.rows
        )

    def downloaded_subjects(self, distributor_id: str, exam_date: date) -> set[str]:
        return {
            r.subject_code for r in self.rows
            if r.distributor_id == distributor_id and r.exam_date == exam_date
        }


class FakeUnitOfWork:

    def __init__(self) -> None:
        self.papers = InMemoryPaperRepository()
        self.downloads = InMemoryDownloadLedger()
        self.entered = 0
        self.rolled_back = 0

    def __enter__(self) -> "FakeUnitOfWork":
        self.entered += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.rolled_back += 1

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        self.rolled_back += 1


# ---------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------

class TickingClock:
    """호출할 때마다 1분씩 증가 (created_at 순서 보장)."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._start = start or datetime(2024, 11, 4, 9, 0, tzinfo=timezone.utc)
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return self._start + timedelta(minutes=next(self._ticks))


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def storage():
    return FakeObjectStorage()


@pytest.fixture
def uow():
    return FakeUnitOfWork()


@pytest.fixture
def repository(uow):
    return uow.papers


@pytest.fixture
def ledger(uow):
    return uow.downloads


@pytest.fixture
def files(storage):
    return FileTransactionManager(storage, bucket=BUCKET)


@pytest.fixture
def cache_store():
    return InMemoryPageCacheStore()


@pytest.fixture
def cache(repository, cache_store):
    return PaginatedQueryCache(
        fetch=make_paper_fetcher(repository, page_size=PAGE_SIZE),
        store=cache_store,
        page_size=PAGE_SIZE,
    )


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def engine(uow, files, cache, clock):
    return StatusTransitionEngine(uow, files, cache=cache, clock=clock)


@pytest.fixture
def queries(cache, repository, ledger, clock):
    return PaperQueryService(cache, repository, ledger=ledger, clock=clock)


@pytest.fixture
def author():
    return Actor(user_id="author-1", role=Role.AUTHOR, department_name=DEPARTMENT)


@pytest.fixture
def subject_reviewer():
    return Actor(user_id="sr-1", role=Role.SUBJECT_REVIEWER, department_name=DEPARTMENT)


@pytest.fixture
def board_reviewer():
    return Actor(user_id="br-1", role=Role.BOARD_REVIEWER, department_name=DEPARTMENT)


@pytest.fixture
def oversight():
    return Actor(user_id="ov-1", role=Role.OVERSIGHT)


@pytest.fixture
def distributor():
    return Actor(user_id="dist-1", role=Role.DISTRIBUTOR)


def make_draft(**overrides) -> PaperDraft:
    data = dict(
        subject_code="CS501",
        subject_name="Compiler Design",
        department_name=DEPARTMENT,
        semester=5,
        academic_year=2024,
        exam_date=date(2024, 11, 20),
    )
    data.update(overrides)
    return PaperDraft(**data)


def make_doc(name: str = "QP.docx", content: bytes = b"doc") -> UploadedDocument:
    return UploadedDocument(filename=name, content=content)


def make_paper(paper_id: str, status: PaperStatus = PaperStatus.SUBMITTED, **overrides) -> ExamPaper:
    data = dict(
        id=paper_id,
        subject_code="CS501",
        subject_name="Compiler Design",
        department_name=DEPARTMENT,
        semester=5,
        academic_year=2024,
        status=status,
        uploaded_by="author-1",
        storage_folder_path="Academic Year 2024/Computer Science/Sem5/Compiler Design",
        qp_file_url=f"{PUBLIC_BASE}/papers/Academic Year 2024/Computer Science/Sem5/Compiler Design/QP.docx",
        qp_file_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        scheme_file_url=f"{PUBLIC_BASE}/papers/Academic Year 2024/Computer Science/Sem5/Compiler Design/Scheme.docx",
        scheme_file_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        created_at=datetime(2024, 11, 1, 9, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 11, 1, 9, 0, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return ExamPaper(**data)


@pytest.fixture
def seed(repository):
    """repository에 ExamPaper를 바로 넣는 헬퍼."""
    def _seed(paper_id: str, status: PaperStatus = PaperStatus.SUBMITTED, **overrides) -> ExamPaper:
        paper = make_paper(paper_id, status, **overrides)
        repository.rows[paper.id] = paper
        return paper
    return _seed


