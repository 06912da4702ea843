"""
Redis 페이지 캐시 — 여러 프로세스가 같은 엔트리 공유

- 값: JSON {"kind": "paper"|"group", "total_count": n, "items": [...]}
- entity_tag 별 key 집합(SET)으로 invalidate
- Redis 클라이언트 없으면 항상 miss (PaginatedQueryCache가 repository로 내려감)
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from papervault.domain.papers.entities import ExamPaper
from papervault.domain.papers.grouping import SubjectGroup
from papervault.domain.papers.query import PageResult

logger = logging.getLogger(__name__)

KEY_PREFIX = "papervault:page:"
TAG_PREFIX = "papervault:tag:"

KIND_PAPER = "paper"
KIND_GROUP = "group"

DEFAULT_TTL_SECONDS = 300


def _encode(result: PageResult) -> str:
    kind = KIND_PAPER
    if result.items and isinstance(result.items[0], SubjectGroup):
        kind = KIND_GROUP
    return json.dumps({
        "kind": kind,
        "total_count": result.total_count,
        "items": [item.to_dict() for item in result.items],
    })


def _decode(raw: str) -> PageResult:
    data = json.loads(raw)
    if data.get("kind") == KIND_GROUP:
        items: list[Any] = [SubjectGroup.from_dict(x) for x in data["items"]]
    else:
        items = [ExamPaper.from_dict(x) for x in data["items"]]
    return PageResult(items=items, total_count=int(data["total_count"]))


class RedisPageCacheStore:
    """PageCacheStore 구현. client 미주입 시 libs.redis.get_redis_client()."""

    def __init__(self, client: Any = None, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._client = client
        self._ttl = ttl_seconds

    def _redis(self):
        if self._client is None:
            from libs.redis import get_redis_client
            self._client = get_redis_client()
        return self._client

    def get(self, key: str) -> Optional[PageResult]:
        client = self._redis()
        if client is None:
            return None
        raw = client.get(KEY_PREFIX + key)
        if raw is None:
            return None
        return _decode(raw)

    def set(self, entity_tag: str, key: str, result: PageResult) -> None:
        client = self._redis()
        if client is None:
            return
        full_key = KEY_PREFIX + key
        tag_key = TAG_PREFIX + entity_tag
        pipe = client.pipeline()
        pipe.set(full_key, _encode(result), ex=self._ttl)
        pipe.sadd(tag_key, full_key)
        pipe.expire(tag_key, self._ttl)
        pipe.execute()

    def invalidate(self, entity_tag: str) -> int:
        client = self._redis()
        if client is None:
            return 0
        tag_key = TAG_PREFIX + entity_tag
        keys = list(client.smembers(tag_key))
        removed = 0
        if keys:
            removed = int(client.delete(*keys))
        client.delete(tag_key)
        logger.debug("redis page cache invalidated tag=%s removed=%s", entity_tag, removed)
        return removed
