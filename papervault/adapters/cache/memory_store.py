"""
In-memory 페이지 캐시 — 프로세스 로컬 (기본값, Redis 미사용 시)
"""
from __future__ import annotations

import threading
from typing import Optional

from papervault.domain.papers.query import PageResult


class InMemoryPageCacheStore:
    """PageCacheStore 구현. entity_tag → key 집합으로 invalidate."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, PageResult] = {}
        self._tags: dict[str, set[str]] = {}

    def get(self, key: str) -> Optional[PageResult]:
        with self._lock:
            result = self._entries.get(key)
        if result is None:
            return None
        # 호출부가 items를 바꿔도 캐시 항목은 그대로
        return PageResult(items=list(result.items), total_count=result.total_count)

    def set(self, entity_tag: str, key: str, result: PageResult) -> None:
        with self._lock:
            self._entries[key] = PageResult(items=list(result.items), total_count=result.total_count)
            self._tags.setdefault(entity_tag, set()).add(key)

    def invalidate(self, entity_tag: str) -> int:
        with self._lock:
            keys = self._tags.pop(entity_tag, set())
            removed = 0
            for key in keys:
                if self._entries.pop(key, None) is not None:
                    removed += 1
            return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
