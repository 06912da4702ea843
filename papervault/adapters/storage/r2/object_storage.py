# PATH: papervault/adapters/storage/r2/object_storage.py
# R2(S3 호환) 객체 스토리지 어댑터 — IObjectStorage 구현
# 클라이언트/공개 URL 미주입 시 libs.s3_client (Django 설정 또는 os.environ)

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from papervault.application.ports.storage import IObjectStorage, StorageError

logger = logging.getLogger(__name__)

# head_object 404는 본문이 없어 Code가 HTTP 상태로 온다
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class R2ObjectStorageAdapter(IObjectStorage):
    """R2(S3 호환) 객체 스토리지 IObjectStorage 구현."""

    def __init__(self, client: Any = None, public_base_url: Optional[str] = None) -> None:
        self._client = client
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    def _s3(self) -> Any:
        if self._client is None:
            from libs.s3_client.client import get_r2_client
            self._client = get_r2_client()
        return self._client

    def put_object(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        try:
            self._s3().put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning("r2 put_object failed bucket=%s key=%s: %s", bucket, key, e)
            raise StorageError(f"put_object failed: {key}") from e

    def object_exists(self, bucket: str, key: str) -> bool:
        try:
            self._s3().head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                return False
            logger.warning("r2 head_object failed bucket=%s key=%s: %s", bucket, key, e)
            raise StorageError(f"head_object failed: {key}") from e
        except BotoCoreError as e:
            logger.warning("r2 head_object failed bucket=%s key=%s: %s", bucket, key, e)
            raise StorageError(f"head_object failed: {key}") from e
        return True

    def delete_object(self, bucket: str, key: str) -> None:
        try:
            self._s3().delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.warning("r2 delete_object failed bucket=%s key=%s: %s", bucket, key, e)
            raise StorageError(f"delete_object failed: {key}") from e

    def public_url(self, bucket: str, key: str) -> str:
        # 공개 도메인이 버킷에 1:1로 붙어 있어 bucket은 URL에 포함되지 않음
        base = self._public_base_url
        if base is None:
            from libs.s3_client.client import get_public_base_url
            base = get_public_base_url()
        return f"{base}/{quote(key, safe='/')}"
