# PATH: papervault/application/ports/storage.py
# 객체 스토리지 포트 — R2/S3 Put·Head·Delete·공개 URL (버킷명은 호출 시점에 주입)

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(Exception):
    """스토리지 호출 실패 (어댑터가 SDK 예외를 감싸서 던짐)."""
    pass


class IObjectStorage(ABC):
    """객체 스토리지 쓰기/삭제 (버킷명 하드코딩 없음, 호출 시 전달)"""

    @abstractmethod
    def put_object(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        """객체 업로드. 같은 키가 있으면 덮어쓴다 (upsert). 실패 시 StorageError."""
        ...

    @abstractmethod
    def object_exists(self, bucket: str, key: str) -> bool:
        """키에 객체가 이미 있는지. 조회 실패 시 StorageError."""
        ...

    @abstractmethod
    def delete_object(self, bucket: str, key: str) -> None:
        """버킷에서 객체 삭제. 실패 시 StorageError."""
        ...

    @abstractmethod
    def public_url(self, bucket: str, key: str) -> str:
        """공개 객체 URL."""
        ...
