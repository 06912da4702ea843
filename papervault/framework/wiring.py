"""
Paper 서비스 조립 — Hexagonal 프레임워크 계층 (thin)

Django settings → Adapter 생성 → Use Case 주입.
View/커맨드는 get_paper_services()만 호출한다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from papervault.adapters.cache.memory_store import InMemoryPageCacheStore
from papervault.adapters.cache.redis_store import DEFAULT_TTL_SECONDS, RedisPageCacheStore
from papervault.adapters.db.django.repositories_papers import (
    DjangoDownloadLedger,
    DjangoPaperRepository,
)
from papervault.adapters.db.django.uow import DjangoUnitOfWork
from papervault.adapters.storage.r2.object_storage import R2ObjectStorageAdapter
from papervault.application.ports.page_cache import PageCacheStore
from papervault.application.use_cases.papers.file_transaction import FileTransactionManager
from papervault.application.use_cases.papers.queries import PaperQueryService, make_paper_fetcher
from papervault.application.use_cases.papers.query_cache import PaginatedQueryCache
from papervault.application.use_cases.papers.status_transition import StatusTransitionEngine
from papervault.domain.papers.query import PAGE_SIZE

logger = logging.getLogger(__name__)

CACHE_BACKEND_MEMORY = "memory"
CACHE_BACKEND_REDIS = "redis"


@dataclass
class PaperServices:
    engine: StatusTransitionEngine
    queries: PaperQueryService
    cache: PaginatedQueryCache


_services: Optional[PaperServices] = None


def build_page_cache_store(backend: Optional[str] = None) -> PageCacheStore:
    from django.conf import settings
    backend = (backend or getattr(settings, "PAPERS_CACHE_BACKEND", CACHE_BACKEND_MEMORY)).lower()

    if backend == CACHE_BACKEND_REDIS:
        from libs.redis import get_redis_client
        client = get_redis_client()
        if client is not None:
            ttl = int(getattr(settings, "PAPERS_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS))
            return RedisPageCacheStore(client=client, ttl_seconds=ttl)
        logger.warning("PAPERS_CACHE_BACKEND=redis but Redis unavailable, using in-memory cache")
    elif backend != CACHE_BACKEND_MEMORY:
        logger.warning("unknown PAPERS_CACHE_BACKEND=%s, using in-memory cache", backend)

    return InMemoryPageCacheStore()


def build_paper_services() -> PaperServices:
    from django.conf import settings
    from libs.s3_client.client import get_bucket

    page_size = int(getattr(settings, "PAPERS_PAGE_SIZE", PAGE_SIZE))
    repository = DjangoPaperRepository()
    cache = PaginatedQueryCache(
        fetch=make_paper_fetcher(repository, page_size=page_size),
        store=build_page_cache_store(),
        page_size=page_size,
    )
    files = FileTransactionManager(R2ObjectStorageAdapter(), bucket=get_bucket())
    engine = StatusTransitionEngine(DjangoUnitOfWork(), files, cache=cache)
    queries = PaperQueryService(cache, repository, ledger=DjangoDownloadLedger())
    return PaperServices(engine=engine, queries=queries, cache=cache)


def get_paper_services() -> PaperServices:
    """프로세스 단위 1회 조립."""
    global _services
    if _services is None:
        _services = build_paper_services()
    return _services


def reset_paper_services() -> None:
    """조립 결과와 Redis 연결 캐시를 버린다 (설정 변경 후 재조립)."""
    from libs.redis import reset_redis_state
    global _services
    _services = None
    reset_redis_state()
