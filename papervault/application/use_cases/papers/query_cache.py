"""
Paginated Query Cache — QueryDescriptor 키 캐시 + 인접 페이지 선조회(prefetch)

- 같은 descriptor는 어느 화면에서 오든 같은 엔트리를 공유
- 조회 성공 시 page_count 계산 후 page+1 / page-1 prefetch (이미 있으면 skip)
- 변경(mutation) 성공 후 invalidate(entity_tag)로 해당 태그 전체 제거
- 캐시는 SSOT가 아님: 저장소 오류는 miss로 취급하고 repository로 내려간다
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from papervault.application.ports.page_cache import PageCacheStore
from papervault.domain.papers.query import PAGE_SIZE, PageResult, QueryDescriptor

logger = logging.getLogger(__name__)

Fetcher = Callable[[QueryDescriptor], PageResult]


class PaginatedQueryCache:

    def __init__(
        self,
        fetch: Fetcher,
        store: PageCacheStore,
        page_size: int = PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._fetch = fetch
        self._store = store
        self.page_size = page_size

    def get(self, descriptor: QueryDescriptor) -> PageResult:
        key = descriptor.cache_key()
        result = self._lookup(key)
        if result is None:
            result = self._fetch(descriptor)
            self._save(descriptor.entity_tag, key, result)
        else:
            logger.debug("page cache hit key=%s", key)

        self._prefetch_adjacent(descriptor, result)
        return result

    def prefetch(self, descriptor: QueryDescriptor) -> None:
        """캐시에 없을 때만 조회해서 채운다. 실패해도 전경 조회에는 영향 없음."""
        key = descriptor.cache_key()
        if self._lookup(key) is not None:
            return
        try:
            result = self._fetch(descriptor)
        except Exception as e:
            logger.warning("page prefetch failed key=%s: %s", key, e)
            return
        self._save(descriptor.entity_tag, key, result)

    def contains(self, descriptor: QueryDescriptor) -> bool:
        return self._lookup(descriptor.cache_key()) is not None

    def invalidate(self, entity_tag: str) -> int:
        try:
            removed = self._store.invalidate(entity_tag)
        except Exception as e:
            logger.warning("page cache invalidate failed tag=%s: %s", entity_tag, e)
            return 0
        logger.debug("page cache invalidated tag=%s removed=%s", entity_tag, removed)
        return removed

    # ------------------------------------------------------------------

    def _prefetch_adjacent(self, descriptor: QueryDescriptor, result: PageResult) -> None:
        page_count = result.page_count(self.page_size)
        page = descriptor.page
        if page < page_count:
            self.prefetch(descriptor.with_page(page + 1))
        if page > 1:
            self.prefetch(descriptor.with_page(page - 1))

    def _lookup(self, key: str) -> Optional[PageResult]:
        try:
            return self._store.get(key)
        except Exception as e:
            logger.warning("page cache get failed key=%s: %s", key, e)
            return None

    def _save(self, entity_tag: str, key: str, result: PageResult) -> None:
        try:
            self._store.set(entity_tag, key, result)
        except Exception as e:
            logger.warning("page cache set failed key=%s: %s", key, e)
