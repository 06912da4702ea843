from datetime import datetime, timedelta, timezone

import pytest

from papervault.adapters.cache.memory_store import InMemoryPageCacheStore
from papervault.application.use_cases.papers.queries import make_paper_fetcher
from papervault.application.use_cases.papers.query_cache import PaginatedQueryCache
from papervault.domain.papers.query import PAPERS_ENTITY_TAG, build_query
from papervault.domain.papers.roles import Actor, Role
from papervault.domain.papers.scope import resolve_scope

T0 = datetime(2024, 10, 1, 9, 0, tzinfo=timezone.utc)
SCOPE = resolve_scope(Actor("ov-1", Role.OVERSIGHT))


@pytest.fixture
def rows25(seed):
    for i in range(25):
        seed(f"p{i:02d}", subject_code=f"CS{500 + i}", created_at=T0 + timedelta(minutes=i))
    seed("old", academic_year=2023, subject_code="CS400")


@pytest.fixture
def cache10(repository):
    return PaginatedQueryCache(
        fetch=make_paper_fetcher(repository, page_size=10),
        store=InMemoryPageCacheStore(),
        page_size=10,
    )


def test_first_page_prefetches_next_not_previous(rows25, cache10):
    q = build_query(SCOPE, filters=[{"field": "academic_year", "value": 2024}], search="", page=1)
    result = cache10.get(q)

    assert len(result.items) == 10
    assert result.total_count == 25
    assert cache10.contains(q.with_page(2))
    assert not cache10.contains(q.with_page(0))
    assert not cache10.contains(q.with_page(3))


def test_middle_page_prefetches_both_neighbours(rows25, cache10):
    q = build_query(SCOPE, filters=[("academic_year", 2024)], page=2)
    cache10.get(q)
    assert cache10.contains(q.with_page(1))
    assert cache10.contains(q.with_page(3))


def test_last_page_does_not_prefetch_past_end(rows25, cache10):
    q = build_query(SCOPE, filters=[("academic_year", 2024)], page=3)
    result = cache10.get(q)
    assert len(result.items) == 5
    assert not cache10.contains(q.with_page(4))


def test_pages_partition_the_result_set(rows25, cache10):
    q = build_query(SCOPE, filters=[("academic_year", 2024)])
    seen = []
    totals = set()
    for page in (1, 2, 3):
        result = cache10.get(q.with_page(page))
        totals.add(result.total_count)
        seen.extend(p.id for p in result.items)
    assert totals == {25}
    assert len(seen) == 25
    assert len(set(seen)) == 25
    assert seen[0] == "p24"


def test_reordered_filters_hit_the_same_entry(rows25, cache10, repository):
    a = build_query(SCOPE, filters=[("academic_year", 2024), ("semester", 5)])
    b = build_query(SCOPE, filters=[("semester", "5"), ("academic_year", "2024")])
    cache10.get(a)
    calls = len(repository.list_calls)
    cache10.get(b)
    assert len(repository.list_calls) == calls


def test_prefetch_skips_cached_pages(rows25, cache10, repository):
    q = build_query(SCOPE, filters=[("academic_year", 2024)])
    cache10.get(q)
    calls = len(repository.list_calls)
    cache10.prefetch(q.with_page(2))
    assert len(repository.list_calls) == calls


def test_search_is_partial_and_case_insensitive(rows25, cache10):
    result = cache10.get(build_query(SCOPE, search="cs52"))
    assert sorted(p.subject_code for p in result.items) == ["CS520", "CS521", "CS522", "CS523", "CS524"]


def test_prefetch_failure_does_not_break_foreground_read(rows25, repository):
    fetch = make_paper_fetcher(repository, page_size=10)

    def flaky(descriptor):
        if descriptor.page != 1:
            raise ConnectionError("network down")
        return fetch(descriptor)

    cache = PaginatedQueryCache(fetch=flaky, store=InMemoryPageCacheStore(), page_size=10)
    q = build_query(SCOPE)
    assert cache.get(q).total_count == 26
    assert not cache.contains(q.with_page(2))


def test_foreground_failure_propagates(repository):
    def broken(descriptor):
        raise ConnectionError("network down")

    cache = PaginatedQueryCache(fetch=broken, store=InMemoryPageCacheStore(), page_size=10)
    with pytest.raises(ConnectionError):
        cache.get(build_query(SCOPE))


class ExplodingStore:
    def get(self, key):
        raise RuntimeError("cache down")

    def set(self, entity_tag, key, result):
        raise RuntimeError("cache down")

    def invalidate(self, entity_tag):
        raise RuntimeError("cache down")


def test_broken_store_falls_through_to_repository(rows25, repository):
    cache = PaginatedQueryCache(
        fetch=make_paper_fetcher(repository, page_size=10),
        store=ExplodingStore(),
        page_size=10,
    )
    assert cache.get(build_query(SCOPE)).total_count == 26
    assert cache.invalidate(PAPERS_ENTITY_TAG) == 0


def test_invalidate_drops_every_entry_under_tag(rows25, cache10):
    q = build_query(SCOPE)
    cache10.get(q)
    assert cache10.invalidate(PAPERS_ENTITY_TAG) == 2
    assert not cache10.contains(q)
    assert not cache10.contains(q.with_page(2))


def test_page_size_must_be_positive(repository):
    with pytest.raises(ValueError):
        PaginatedQueryCache(fetch=make_paper_fetcher(repository), store=InMemoryPageCacheStore(), page_size=0)
