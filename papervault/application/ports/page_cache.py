"""
페이지 캐시 저장소 포트 — 캐시 키(문자열) → PageResult

캐시는 최적화일 뿐 SSOT가 아님. 저장소가 실패하면 miss로 취급한다.
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Protocol

from papervault.domain.papers.query import PageResult


class PageCacheStore(Protocol):

    @abstractmethod
    def get(self, key: str) -> Optional[PageResult]:
        """없으면 None."""
        ...

    @abstractmethod
    def set(self, entity_tag: str, key: str, result: PageResult) -> None:
        """entity_tag 아래에 저장 (invalidate 단위)."""
        ...

    @abstractmethod
    def invalidate(self, entity_tag: str) -> int:
        """entity_tag 아래 엔트리 전부 제거. 제거 건수 반환."""
        ...
