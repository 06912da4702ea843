"""
File Transaction Manager — QP/Scheme 2개 파일 업로드를 하나의 트랜잭션처럼 (saga + 보상)

순서: QP → Scheme (순차). 보상 로직이 무엇을 지울지 알려면 순서가 고정되어야 한다.

1. (연도, 학과, 학기, 과목명)으로 폴더 경로 계산
2. QP 업로드 (덮어쓰기 허용). 실패 → StorageUploadError("QP")
3. Scheme 업로드. 실패 → 이번 호출에서 새로 만든 QP 삭제 후 StorageUploadError("Scheme")
4. 올린 파일 URL + 생략된 파일의 기존 URL을 합쳐 반환

DB 기록 실패 시 호출부가 rollback(documents)로 이번 호출에서 새로 만든 객체만 지운다.
업로드 전에 이미 있던 키(이 레코드든 같은 과목 폴더의 다른 레코드든)는 삭제 대상이 아님.
존재 여부를 확인하지 못한 키도 기존 객체로 취급한다.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from papervault.application.ports.storage import IObjectStorage, StorageError
from papervault.domain.papers.entities import DocumentSet, UploadedDocument
from papervault.domain.papers.errors import StorageUploadError, ValidationError
from papervault.domain.papers.storage_paths import folder_path_for, qp_key, scheme_key

logger = logging.getLogger(__name__)

QP = "QP"
SCHEME = "Scheme"

LOG_UPLOADED = "PAPER_UPLOAD document=%s key=%s size=%s overwrite=%s"
LOG_COMPENSATED = "PAPER_COMPENSATE key=%s reason=%s"
LOG_COMPENSATE_FAILED = "PAPER_COMPENSATE_FAILED key=%s reason=%s error=%s"


class FileTransactionManager:

    def __init__(self, storage: IObjectStorage, bucket: str) -> None:
        if not bucket:
            raise ValueError("bucket is required")
        self._storage = storage
        self._bucket = bucket

    def replace_documents(
        self,
        paper,
        qp_file: Optional[UploadedDocument] = None,
        scheme_file: Optional[UploadedDocument] = None,
        require_both: bool = False,
    ) -> DocumentSet:
        """
        paper: ExamPaper 또는 PaperDraft (연도/학과/학기/과목명 필요).
        require_both=True(신규 제출)면 두 파일 모두 필수.
        편집 모드에서 생략된 파일은 기존 URL/타입을 그대로 유지.
        """
        current_qp_url = getattr(paper, "qp_file_url", "") or ""
        current_qp_type = getattr(paper, "qp_file_type", "") or ""
        current_scheme_url = getattr(paper, "scheme_file_url", "") or ""
        current_scheme_type = getattr(paper, "scheme_file_type", "") or ""

        if require_both and (qp_file is None or scheme_file is None):
            raise ValidationError("QP and Scheme files are required")
        # 쌍 불변식: 생략된 쪽은 기존 파일이 있어야 함
        if qp_file is None and not current_qp_url:
            raise ValidationError("QP file is required (no existing QP to carry forward)")
        if scheme_file is None and not current_scheme_url:
            raise ValidationError("Scheme file is required (no existing Scheme to carry forward)")

        folder = folder_path_for(paper)
        created: list[str] = []
        overwritten: list[str] = []

        qp_url, qp_type = current_qp_url, current_qp_type
        if qp_file is not None:
            key = qp_key(folder, qp_file.ext)
            url = self._storage.public_url(self._bucket, key)
            existed = url == current_qp_url or self._exists(key)
            try:
                self._put(key, qp_file)
            except StorageError as e:
                logger.warning("QP upload failed key=%s: %s", key, e)
                raise StorageUploadError(QP, e) from e
            self._track(key, existed, created, overwritten)
            logger.info(LOG_UPLOADED, QP, key, len(qp_file.content), existed)
            qp_url, qp_type = url, qp_file.mime_type

        scheme_url, scheme_type = current_scheme_url, current_scheme_type
        if scheme_file is not None:
            key = scheme_key(folder, scheme_file.ext)
            url = self._storage.public_url(self._bucket, key)
            existed = url == current_scheme_url or self._exists(key)
            try:
                self._put(key, scheme_file)
            except Exception as e:
                self._remove(created, reason="scheme_upload_failed")
                if isinstance(e, StorageError):
                    logger.warning("Scheme upload failed key=%s: %s", key, e)
                    raise StorageUploadError(SCHEME, e) from e
                raise
            self._track(key, existed, created, overwritten)
            logger.info(LOG_UPLOADED, SCHEME, key, len(scheme_file.content), existed)
            scheme_url, scheme_type = url, scheme_file.mime_type

        return DocumentSet(
            qp_file_url=qp_url,
            qp_file_type=qp_type,
            scheme_file_url=scheme_url,
            scheme_file_type=scheme_type,
            storage_folder_path=folder,
            uploaded_keys=tuple(created),
            overwritten_keys=tuple(overwritten),
        )

    def rollback(self, documents: Optional[DocumentSet], reason: str = "persist_failed") -> None:
        """DB 기록 실패 시 보상. 이번 호출에서 새로 만든 객체만 삭제."""
        if documents is None:
            return
        self._remove(documents.uploaded_keys, reason=reason)

    # ------------------------------------------------------------------

    def _put(self, key: str, document: UploadedDocument) -> None:
        self._storage.put_object(self._bucket, key, document.content, document.mime_type)

    def _exists(self, key: str) -> bool:
        try:
            return self._storage.object_exists(self._bucket, key)
        except StorageError as e:
            logger.warning("object existence check failed key=%s, treating as existing: %s", key, e)
            return True

    @staticmethod
    def _track(key: str, replaces_existing: bool, created: list[str], overwritten: list[str]) -> None:
        if replaces_existing:
            overwritten.append(key)
        else:
            created.append(key)

    def _remove(self, keys: Iterable[str], reason: str) -> None:
        # 보상 실패는 기록만 하고 원래 오류를 가리지 않는다
        for key in keys:
            try:
                self._storage.delete_object(self._bucket, key)
                logger.info(LOG_COMPENSATED, key, reason)
            except StorageError as e:
                logger.error(LOG_COMPENSATE_FAILED, key, reason, e)
