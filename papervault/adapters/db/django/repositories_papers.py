"""
ExamPaper / PaperDownload Repository — Django ORM 구현 (메서드 내부에서만 apps.domains.papers import)

- scope 필수 filter + 허용 상태 + 호출자 filter + subject_code 부분일치 검색
- 정렬: created_at 내림차순 (동률은 id)
- 상태 변경은 filter(id, status).update() CAS
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from papervault.domain.papers.entities import ExamPaper, PaperDownload, PaperStatus
from papervault.domain.papers.errors import (
    AlreadyDistributed,
    IllegalTransition,
    PaperNotFound,
    PersistenceError,
    TransientUnavailable,
)
from papervault.domain.papers.query import PAGE_SIZE, PageResult, QueryDescriptor, page_bounds
from papervault.domain.papers.scope import AccessScope

logger = logging.getLogger(__name__)

# update_fields로 바꿀 수 있는 컬럼 (id/uploaded_by/created_at 제외)
UPDATABLE_FIELDS = frozenset({
    "status",
    "storage_folder_path",
    "qp_file_url",
    "qp_file_type",
    "scheme_file_url",
    "scheme_file_type",
    "approved_by",
    "locked_by",
    "acted_by",
    "exam_date",
    "is_downloaded",
    "downloaded_at",
    "updated_at",
})


def _model_to_entity(m) -> Optional[ExamPaper]:
    if m is None:
        return None
    return ExamPaper(
        id=str(m.id),
        subject_code=m.subject_code,
        subject_name=m.subject_name,
        department_name=m.department_name,
        semester=int(m.semester),
        academic_year=int(m.academic_year),
        status=PaperStatus(m.status),
        uploaded_by=m.uploaded_by,
        storage_folder_path=m.storage_folder_path or "",
        qp_file_url=m.qp_file_url or "",
        qp_file_type=m.qp_file_type or "",
        scheme_file_url=m.scheme_file_url or "",
        scheme_file_type=m.scheme_file_type or "",
        approved_by=m.approved_by,
        locked_by=m.locked_by,
        acted_by=m.acted_by,
        exam_date=m.exam_date,
        is_downloaded=bool(m.is_downloaded),
        downloaded_at=m.downloaded_at,
        created_at=getattr(m, "created_at", None),
        updated_at=getattr(m, "updated_at", None),
    )


def _db_value(value: Any) -> Any:
    if isinstance(value, PaperStatus):
        return value.value
    return value


def _translate_db_error(e: Exception, action: str) -> Exception:
    """DB 예외 → 도메인 오류. 연결 계열은 재시도 가능."""
    from django.db import InterfaceError, OperationalError
    if isinstance(e, (OperationalError, InterfaceError)):
        return TransientUnavailable(f"Database unavailable during {action}: {e}")
    return PersistenceError(f"Database error during {action}: {e}")


def _scoped_queryset(scope: Optional[AccessScope]):
    from apps.domains.papers.models import ExamPaperModel
    qs = ExamPaperModel.objects.all()
    if scope is None:
        return qs
    if scope.is_empty:
        return qs.none()
    for field, value in scope.mandatory_filters:
        qs = qs.filter(**{field: value})
    return qs.filter(status__in=[s.value for s in scope.allowed_statuses])


def _descriptor_queryset(descriptor: QueryDescriptor):
    qs = _scoped_queryset(descriptor.scope)
    for f in descriptor.filters:
        qs = qs.filter(**{f.field: _db_value(f.value)})
    if descriptor.search:
        qs = qs.filter(subject_code__icontains=descriptor.search)
    return qs.order_by("-created_at", "-id")


class DjangoPaperRepository:
    """PaperRepository 구현. ORM 접근은 모두 메서드 내부에서 lazy import."""

    def get(self, paper_id: str, scope: Optional[AccessScope] = None) -> ExamPaper:
        from django.db import DatabaseError
        try:
            m = _scoped_queryset(scope).filter(id=paper_id).first()
        except DatabaseError as e:
            raise _translate_db_error(e, "get") from e
        if m is None:
            raise PaperNotFound(paper_id)
        return _model_to_entity(m)

    def list(self, descriptor: QueryDescriptor, page_size: int = PAGE_SIZE) -> PageResult[ExamPaper]:
        from django.db import DatabaseError
        start, end = page_bounds(descriptor.page, page_size)
        try:
            qs = _descriptor_queryset(descriptor)
            total = qs.count()
            rows = list(qs[start:end])
        except DatabaseError as e:
            raise _translate_db_error(e, "list") from e
        return PageResult(items=[_model_to_entity(m) for m in rows], total_count=total)

    def list_all(self, descriptor: QueryDescriptor) -> list[ExamPaper]:
        from django.db import DatabaseError
        try:
            rows = list(_descriptor_queryset(descriptor))
        except DatabaseError as e:
            raise _translate_db_error(e, "list_all") from e
        return [_model_to_entity(m) for m in rows]

    def create(self, paper: ExamPaper) -> ExamPaper:
        from django.db import DatabaseError
        from apps.domains.papers.models import ExamPaperModel
        try:
            m = ExamPaperModel.objects.create(
                id=paper.id,
                subject_code=paper.subject_code,
                subject_name=paper.subject_name,
                department_name=paper.department_name,
                semester=paper.semester,
                academic_year=paper.academic_year,
                status=paper.status.value,
                uploaded_by=paper.uploaded_by,
                storage_folder_path=paper.storage_folder_path,
                qp_file_url=paper.qp_file_url,
                qp_file_type=paper.qp_file_type,
                scheme_file_url=paper.scheme_file_url,
                scheme_file_type=paper.scheme_file_type,
                approved_by=paper.approved_by,
                locked_by=paper.locked_by,
                acted_by=paper.acted_by,
                exam_date=paper.exam_date,
                is_downloaded=paper.is_downloaded,
                downloaded_at=paper.downloaded_at,
            )
        except DatabaseError as e:
            raise _translate_db_error(e, "create") from e
        return _model_to_entity(m)

    def update_fields(
        self,
        paper_id: str,
        fields: dict[str, Any],
        expected_status: Optional[PaperStatus] = None,
    ) -> ExamPaper:
        from django.db import DatabaseError
        from django.utils import timezone
        from apps.domains.papers.models import ExamPaperModel

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise PersistenceError(f"Unsupported update fields: {sorted(unknown)}")
        values = {k: _db_value(v) for k, v in fields.items()}
        values.setdefault("updated_at", timezone.now())

        try:
            qs = ExamPaperModel.objects.filter(id=paper_id)
            if expected_status is not None:
                qs = qs.filter(status=_db_value(expected_status))
            updated = qs.update(**values)
            if updated == 0:
                current = (
                    ExamPaperModel.objects.filter(id=paper_id)
                    .values_list("status", flat=True)
                    .first()
                )
                if current is None:
                    raise PaperNotFound(paper_id)
                target = values.get("status", current)
                raise IllegalTransition(
                    None,
                    current,
                    target,
                    reason="stale",
                )
            m = ExamPaperModel.objects.get(id=paper_id)
        except DatabaseError as e:
            raise _translate_db_error(e, "update") from e
        return _model_to_entity(m)

    def status_counts(self, scope: AccessScope) -> dict[PaperStatus, int]:
        from django.db import DatabaseError
        from django.db.models import Count
        try:
            rows = (
                _scoped_queryset(scope)
                .order_by()
                .values("status")
                .annotate(n=Count("id"))
            )
            return {PaperStatus(r["status"]): int(r["n"]) for r in rows}
        except DatabaseError as e:
            raise _translate_db_error(e, "status_counts") from e

    def count_created_since(self, scope: AccessScope, since: datetime) -> int:
        from django.db import DatabaseError
        try:
            return _scoped_queryset(scope).filter(created_at__gte=since).count()
        except DatabaseError as e:
            raise _translate_db_error(e, "count_created_since") from e


class DjangoDownloadLedger:
    """DownloadLedger 구현. 유일성은 DB unique constraint."""

    def record(self, download: PaperDownload) -> PaperDownload:
        from django.db import DatabaseError, IntegrityError, transaction
        from django.utils import timezone
        from apps.domains.papers.models import PaperDownloadModel
        try:
            # 바깥 트랜잭션을 깨지 않도록 savepoint
            with transaction.atomic():
                m = PaperDownloadModel.objects.create(
                    distributor_id=download.distributor_id,
                    subject_code=download.subject_code,
                    exam_date=download.exam_date,
                    paper_id=download.paper_id,
                    downloaded_at=download.downloaded_at or timezone.now(),
                )
        except IntegrityError as e:
            raise AlreadyDistributed(
                f"Already distributed: distributor={download.distributor_id} "
                f"subject={download.subject_code} exam_date={download.exam_date}"
            ) from e
        except DatabaseError as e:
            raise _translate_db_error(e, "record_download") from e
        return PaperDownload(
            distributor_id=m.distributor_id,
            subject_code=m.subject_code,
            exam_date=m.exam_date,
            paper_id=str(m.paper_id),
            downloaded_at=m.downloaded_at,
        )

    def exists(self, distributor_id: str, subject_code: str, exam_date: date) -> bool:
        from apps.domains.papers.models import PaperDownloadModel
        return PaperDownloadModel.objects.filter(
            distributor_id=distributor_id,
            subject_code=subject_code,
            exam_date=exam_date,
        ).exists()

    def downloaded_subjects(self, distributor_id: str, exam_date: date) -> set[str]:
        from apps.domains.papers.models import PaperDownloadModel
        codes = PaperDownloadModel.objects.filter(
            distributor_id=distributor_id,
            exam_date=exam_date,
        ).values_list("subject_code", flat=True)
        return set(codes)
