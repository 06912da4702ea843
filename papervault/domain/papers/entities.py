"""
시험지(ExamPaper) 도메인 엔티티 — 순수 파이썬 (Django/ORM/boto3 미사용)

상태 변경은 Status Transition Engine을 통해서만 일어난다.
엔티티는 규칙 판단에 필요한 값만 보유.
"""
from __future__ import annotations

import mimetypes
import os
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class PaperStatus(str, Enum):
    """시험지 상태 (apps.domains.papers.models ExamPaperModel choices와 동기화)."""
    SUBMITTED = "Submitted"
    SUBJECT_APPROVED = "SubjectApproved"
    BOARD_APPROVED = "BoardApproved"
    LOCKED = "Locked"
    DISTRIBUTED = "Distributed"
    CORRECTION_REQUESTED = "CorrectionRequested"


# 더 이상 전이 없음
TERMINAL_STATUSES = (PaperStatus.DISTRIBUTED,)

# 대시보드 "검토 대기" 집계 대상
PENDING_REVIEW_STATUSES = (PaperStatus.SUBMITTED, PaperStatus.SUBJECT_APPROVED)

DEFAULT_DOCUMENT_EXT = "docx"


@dataclass(frozen=True)
class UploadedDocument:
    """업로드 파일 1개 (QP 또는 Scheme). content_type 없으면 파일명으로 추정."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def ext(self) -> str:
        _, ext = os.path.splitext(self.filename or "")
        ext = ext.lstrip(".").lower()
        return ext or DEFAULT_DOCUMENT_EXT

    @property
    def mime_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.filename or "")
        return guessed or "application/octet-stream"


@dataclass
class PaperDraft:
    """Author 최초 제출 시 입력값 (id/상태/파일 URL 없음)."""
    subject_code: str
    subject_name: str
    department_name: str
    semester: int
    academic_year: int
    exam_date: Optional[date] = None


@dataclass
class ExamPaper:
    """
    시험지 도메인 엔티티.
    QP/Scheme URL은 항상 쌍으로 존재 (File Transaction Manager가 보장).
    """
    id: str
    subject_code: str
    subject_name: str
    department_name: str
    semester: int
    academic_year: int
    status: PaperStatus
    uploaded_by: str
    storage_folder_path: str = ""
    qp_file_url: str = ""
    qp_file_type: str = ""
    scheme_file_url: str = ""
    scheme_file_type: str = ""
    approved_by: Optional[str] = None
    locked_by: Optional[str] = None
    # 마지막으로 전이를 수행한 사용자
    acted_by: Optional[str] = None
    exam_date: Optional[date] = None
    is_downloaded: bool = False
    downloaded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def has_documents(self) -> bool:
        return bool(self.qp_file_url) and bool(self.scheme_file_url)

    def to_dict(self) -> dict[str, Any]:
        """캐시 직렬화용 (JSON 호환)."""
        data = asdict(self)
        data["status"] = self.status.value
        for key in ("exam_date", "downloaded_at", "created_at", "updated_at"):
            value = data.get(key)
            data[key] = value.isoformat() if value is not None else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExamPaper":
        payload = dict(data)
        payload["status"] = PaperStatus(payload["status"])
        if payload.get("exam_date"):
            payload["exam_date"] = date.fromisoformat(payload["exam_date"])
        for key in ("downloaded_at", "created_at", "updated_at"):
            if payload.get(key):
                payload[key] = datetime.fromisoformat(payload[key])
        return cls(**payload)


@dataclass(frozen=True)
class DocumentSet:
    """
    replace_documents 결과.
    uploaded_keys: 이번 호출에서 새로 만든 객체 키 (rollback 대상).
    overwritten_keys: 기존 레코드 URL이 가리키던 키를 덮어쓴 경우 (rollback 제외).
    """
    qp_file_url: str
    qp_file_type: str
    scheme_file_url: str
    scheme_file_type: str
    storage_folder_path: str
    uploaded_keys: tuple[str, ...] = field(default_factory=tuple)
    overwritten_keys: tuple[str, ...] = field(default_factory=tuple)

    def as_fields(self) -> dict[str, str]:
        return {
            "qp_file_url": self.qp_file_url,
            "qp_file_type": self.qp_file_type,
            "scheme_file_url": self.scheme_file_url,
            "scheme_file_type": self.scheme_file_type,
            "storage_folder_path": self.storage_folder_path,
        }


@dataclass(frozen=True)
class PaperDownload:
    """배포(다운로드) 원장 1건. (distributor_id, subject_code, exam_date) 당 1건."""
    distributor_id: str
    subject_code: str
    exam_date: date
    paper_id: str
    downloaded_at: Optional[datetime] = None
