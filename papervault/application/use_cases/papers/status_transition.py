"""
Status Transition Engine — 시험지 상태 변경 Use Case (도메인/포트만 사용, Django/boto3 미사용)

- 전이 가능 여부는 domain.papers.transitions 표만 조회
- 문서를 동반하는 전이는 File Transaction Manager를 먼저 실행한 뒤 DB 기록
- DB 기록은 상태 CAS (현재 상태가 읽은 시점과 같을 때만 성공)
- DB 기록 실패 시 이번 호출에서 새로 올린 파일만 보상 삭제
- 커밋 후 캐시 invalidate
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from papervault.application.ports.unit_of_work import UnitOfWork
from papervault.application.use_cases.papers.file_transaction import FileTransactionManager
from papervault.application.use_cases.papers.query_cache import PaginatedQueryCache
from papervault.domain.papers import transitions
from papervault.domain.papers.entities import (
    DocumentSet,
    ExamPaper,
    PaperDownload,
    PaperDraft,
    PaperStatus,
    UploadedDocument,
)
from papervault.domain.papers.errors import (
    IllegalTransition,
    PaperNotFound,
    PersistenceError,
    ValidationError,
)
from papervault.domain.papers.query import PAPERS_ENTITY_TAG
from papervault.domain.papers.roles import Actor, Role
from papervault.domain.papers.scope import resolve_scope
from papervault.domain.papers.storage_paths import storage_folder_path
from papervault.domain.shared.ids import generate_paper_id, generate_request_id

logger = logging.getLogger(__name__)

LOG_SUBMITTED = "PAPER_SUBMIT rid=%s paper_id=%s subject=%s actor=%s"
LOG_TRANSITION = "PAPER_TRANSITION rid=%s paper_id=%s from=%s to=%s actor=%s role=%s documents=%s"
LOG_DISTRIBUTED = "PAPER_DISTRIBUTE rid=%s paper_id=%s subject=%s exam_date=%s actor=%s"
LOG_REJECTED = "PAPER_TRANSITION_REJECTED rid=%s paper_id=%s from=%s to=%s role=%s reason=%s"

SUBJECT_CODE_MAX = 16
SEMESTER_RANGE = range(1, 9)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_status(value: Any) -> PaperStatus:
    if isinstance(value, PaperStatus):
        return value
    try:
        return PaperStatus(str(value))
    except ValueError:
        raise ValidationError(f"Unknown status: {value!r}")


def validate_draft(draft: PaperDraft) -> PaperDraft:
    """최초 제출 입력값 정규화/검증."""
    code = (draft.subject_code or "").strip()
    name = (draft.subject_name or "").strip()
    department = (draft.department_name or "").strip()
    if not code:
        raise ValidationError("subject_code is required")
    if len(code) > SUBJECT_CODE_MAX:
        raise ValidationError(f"subject_code too long: {code}")
    if not name:
        raise ValidationError("subject_name is required")
    if not department:
        raise ValidationError("department_name is required")
    try:
        semester = int(draft.semester)
        academic_year = int(draft.academic_year)
    except (TypeError, ValueError):
        raise ValidationError("semester and academic_year must be integers")
    if semester not in SEMESTER_RANGE:
        raise ValidationError(f"semester out of range: {semester}")
    if academic_year <= 0:
        raise ValidationError(f"invalid academic_year: {academic_year}")
    return PaperDraft(
        subject_code=code,
        subject_name=name,
        department_name=department,
        semester=semester,
        academic_year=academic_year,
        exam_date=draft.exam_date,
    )


class StatusTransitionEngine:

    def __init__(
        self,
        uow: UnitOfWork,
        files: FileTransactionManager,
        cache: Optional[PaginatedQueryCache] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow = uow
        self._files = files
        self._cache = cache
        self._clock = clock

    # ------------------------------------------------------------------
    # 생성
    # ------------------------------------------------------------------

    def submit_paper(
        self,
        actor: Actor,
        draft: PaperDraft,
        qp_file: Optional[UploadedDocument],
        scheme_file: Optional[UploadedDocument],
    ) -> ExamPaper:
        """Author 최초 제출. QP/Scheme 둘 다 필수, 상태 Submitted."""
        rid = generate_request_id()
        if actor.role != Role.AUTHOR:
            logger.info(LOG_REJECTED, rid, None, None, PaperStatus.SUBMITTED.value, actor.role_name, "create_not_allowed")
            raise IllegalTransition(actor.role_name, None, PaperStatus.SUBMITTED.value, reason="create_not_allowed")
        draft = validate_draft(draft)
        if qp_file is None or scheme_file is None:
            raise ValidationError("QP and Scheme files are required")

        now = self._clock()
        paper = ExamPaper(
            id=generate_paper_id(),
            subject_code=draft.subject_code,
            subject_name=draft.subject_name,
            department_name=draft.department_name,
            semester=draft.semester,
            academic_year=draft.academic_year,
            status=PaperStatus.SUBMITTED,
            uploaded_by=actor.user_id,
            storage_folder_path=storage_folder_path(
                academic_year=draft.academic_year,
                department_name=draft.department_name,
                semester=draft.semester,
                subject_name=draft.subject_name,
            ),
            acted_by=actor.user_id,
            exam_date=draft.exam_date,
            created_at=now,
            updated_at=now,
        )

        documents = self._files.replace_documents(paper, qp_file, scheme_file, require_both=True)
        paper = replace(paper, **documents.as_fields())

        try:
            with self._uow:
                created = self._uow.papers.create(paper)
        except Exception as e:
            self._compensate(documents, e)
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Paper could not be created: {e}") from e

        logger.info(LOG_SUBMITTED, rid, created.id, created.subject_code, actor.user_id)
        self._invalidate()
        return created

    # ------------------------------------------------------------------
    # 전이
    # ------------------------------------------------------------------

    def transition(
        self,
        actor: Actor,
        paper_id: str,
        target: Any,
        qp_file: Optional[UploadedDocument] = None,
        scheme_file: Optional[UploadedDocument] = None,
    ) -> ExamPaper:
        """
        (role, 현재 상태) → target 전이. 표에 없으면 IllegalTransition, 레코드 변경 없음.
        조회는 학과/작성자 filter만 적용하고, 상태 판정은 전이표에 맡긴다.
        문서 첨부는 문서 동반 전이(재제출, Board 승인)에서만 허용.
        """
        rid = generate_request_id()
        target = _parse_status(target)
        has_documents = qp_file is not None or scheme_file is not None
        if target == PaperStatus.DISTRIBUTED:
            if has_documents:
                raise ValidationError("Documents cannot be attached to a distribution")
            return self.distribute(actor, paper_id)

        scope = resolve_scope(actor).row_scope()
        with self._uow:
            paper = self._uow.papers.get(paper_id, scope=scope)

        allowed = transitions.allowed_targets(actor.role, paper.status)
        if target not in allowed:
            logger.info(LOG_REJECTED, rid, paper_id, paper.status.value, target.value, actor.role_name, "not_in_table")
            raise IllegalTransition(
                actor.role_name,
                paper.status.value,
                target.value,
                allowed=[s.value for s in allowed],
            )

        if has_documents and not transitions.carries_documents(paper.status, target):
            raise ValidationError(
                f"Documents cannot be attached to {paper.status.value} -> {target.value}"
            )
        if has_documents and transitions.requires_document_pair(paper.status, target):
            if qp_file is None or scheme_file is None:
                raise ValidationError("Scrutinized QP and Scheme must be attached together")

        documents: Optional[DocumentSet] = None
        if has_documents:
            documents = self._files.replace_documents(paper, qp_file, scheme_file)

        fields = self._stamp_fields(actor, paper, target)
        if documents is not None:
            fields.update(documents.as_fields())

        try:
            with self._uow:
                updated = self._uow.papers.update_fields(
                    paper_id, fields, expected_status=paper.status
                )
        except Exception as e:
            self._compensate(documents, e)
            if isinstance(e, (IllegalTransition, PaperNotFound)):
                logger.info(LOG_REJECTED, rid, paper_id, paper.status.value, target.value, actor.role_name, "stale")
                raise
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Paper could not be saved: {e}") from e

        logger.info(
            LOG_TRANSITION,
            rid,
            paper_id,
            paper.status.value,
            target.value,
            actor.user_id,
            actor.role_name,
            documents is not None,
        )
        self._invalidate()
        return updated

    def approve(
        self,
        actor: Actor,
        paper_id: str,
        qp_file: Optional[UploadedDocument] = None,
        scheme_file: Optional[UploadedDocument] = None,
    ) -> ExamPaper:
        """역할별 승인 (SubjectReviewer → SubjectApproved, BoardReviewer → BoardApproved)."""
        target = transitions.APPROVE_TARGETS.get(actor.role)
        if target is None:
            raise IllegalTransition(actor.role_name, None, "approve", reason="no_approval_for_role")
        return self.transition(actor, paper_id, target, qp_file=qp_file, scheme_file=scheme_file)

    def request_correction(self, actor: Actor, paper_id: str) -> ExamPaper:
        return self.transition(actor, paper_id, PaperStatus.CORRECTION_REQUESTED)

    def resubmit(
        self,
        actor: Actor,
        paper_id: str,
        qp_file: Optional[UploadedDocument] = None,
        scheme_file: Optional[UploadedDocument] = None,
    ) -> ExamPaper:
        """Author 재제출. 생략한 파일은 이전 리비전 URL 유지."""
        return self.transition(
            actor, paper_id, PaperStatus.SUBMITTED, qp_file=qp_file, scheme_file=scheme_file
        )

    def lock(self, actor: Actor, paper_id: str) -> ExamPaper:
        return self.transition(actor, paper_id, PaperStatus.LOCKED)

    def rollback(self, actor: Actor, paper_id: str) -> ExamPaper:
        """Oversight 한 단계 되돌리기 (BoardApproved → SubjectApproved → Submitted)."""
        scope = resolve_scope(actor).row_scope()
        with self._uow:
            paper = self._uow.papers.get(paper_id, scope=scope)
        target = transitions.ROLLBACK_TARGETS.get(paper.status)
        if target is None:
            raise IllegalTransition(
                actor.role_name,
                paper.status.value,
                "rollback",
                allowed=[s.value for s in transitions.allowed_targets(actor.role, paper.status)],
                reason="no_rollback_target",
            )
        return self.transition(actor, paper_id, target)

    # ------------------------------------------------------------------
    # 배포
    # ------------------------------------------------------------------

    def distribute(
        self,
        actor: Actor,
        paper_id: str,
        exam_date: Optional[date] = None,
    ) -> ExamPaper:
        """
        Locked → Distributed. 배포자별 원장에 기록.
        이미 다른 배포자가 받아 Distributed인 시험지는 원장만 추가 (상태 유지).
        (distributor, subject_code, exam_date) 중복이면 AlreadyDistributed.
        """
        rid = generate_request_id()
        scope = resolve_scope(actor).row_scope()
        now = self._clock()

        with self._uow:
            paper = self._uow.papers.get(paper_id, scope=scope)
            allowed = transitions.allowed_targets(actor.role, paper.status)
            already = paper.status == PaperStatus.DISTRIBUTED and actor.role == Role.DISTRIBUTOR
            if PaperStatus.DISTRIBUTED not in allowed and not already:
                logger.info(
                    LOG_REJECTED, rid, paper_id, paper.status.value,
                    PaperStatus.DISTRIBUTED.value, actor.role_name, "not_in_table",
                )
                raise IllegalTransition(
                    actor.role_name,
                    paper.status.value,
                    PaperStatus.DISTRIBUTED.value,
                    allowed=[s.value for s in allowed],
                )

            day = exam_date or paper.exam_date or now.date()
            self._uow.downloads.record(
                PaperDownload(
                    distributor_id=actor.user_id,
                    subject_code=paper.subject_code,
                    exam_date=day,
                    paper_id=paper.id,
                    downloaded_at=now,
                )
            )
            if already:
                updated = paper
            else:
                updated = self._uow.papers.update_fields(
                    paper_id,
                    {
                        "status": PaperStatus.DISTRIBUTED,
                        "is_downloaded": True,
                        "downloaded_at": now,
                        "acted_by": actor.user_id,
                        "updated_at": now,
                    },
                    expected_status=PaperStatus.LOCKED,
                )

        logger.info(LOG_DISTRIBUTED, rid, paper_id, paper.subject_code, day, actor.user_id)
        self._invalidate()
        return updated

    # ------------------------------------------------------------------

    def _stamp_fields(self, actor: Actor, paper: ExamPaper, target: PaperStatus) -> dict[str, Any]:
        """acted-by / updated_at 기록. uploaded_by는 절대 건드리지 않는다."""
        fields: dict[str, Any] = {
            "status": target,
            "acted_by": actor.user_id,
            "updated_at": self._clock(),
        }
        if transitions.APPROVE_TARGETS.get(actor.role) == target:
            fields["approved_by"] = actor.user_id
        elif target == PaperStatus.SUBMITTED:
            # 재제출/되돌리기로 검토 처음부터
            fields["approved_by"] = None
        if target == PaperStatus.LOCKED:
            fields["locked_by"] = actor.user_id
        return fields

    def _compensate(self, documents: Optional[DocumentSet], error: BaseException) -> None:
        if documents is None:
            return
        logger.warning("paper persist failed, removing uploaded files: %s", error)
        self._files.rollback(documents)

    def _invalidate(self) -> None:
        if self._cache is not None:
            self._cache.invalidate(PAPERS_ENTITY_TAG)
