from datetime import date

import pytest

from papervault.domain.papers.entities import PaperStatus
from papervault.domain.papers.errors import ValidationError
from papervault.domain.papers.query import (
    VIEW_DISTRIBUTION_BOARD,
    PageResult,
    build_query,
    normalize_filters,
    page_bounds,
)
from papervault.domain.papers.roles import Actor, Role
from papervault.domain.papers.scope import resolve_scope

SCOPE = resolve_scope(Actor("ov-1", Role.OVERSIGHT))


def test_filters_are_order_insensitive():
    a = build_query(SCOPE, filters=[
        {"field": "academic_year", "value": 2024},
        {"field": "semester", "value": "5"},
    ])
    b = build_query(SCOPE, filters=[("semester", 5), ("academic_year", "2024")])
    assert a == b
    assert a.cache_key() == b.cache_key()


def test_blank_and_all_values_are_dropped():
    filters = normalize_filters([
        {"field": "status", "value": "all"},
        {"field": "department_name", "value": ""},
        {"field": "semester", "value": None},
    ])
    assert filters == ()


def test_duplicate_filters_collapse():
    filters = normalize_filters([("semester", 5), ("semester", "5")])
    assert len(filters) == 1


def test_filter_values_are_converted():
    q = build_query(SCOPE, filters=[
        ("status", "Locked"),
        ("exam_date", "2024-11-20"),
    ])
    assert q.filter_value("status") is PaperStatus.LOCKED
    assert q.filter_value("exam_date") == date(2024, 11, 20)


@pytest.mark.parametrize("raw", [
    [("grade", "A")],
    [("semester", "fifth")],
    [("status", "Archived")],
    ["semester=5"],
])
def test_invalid_filters_raise(raw):
    with pytest.raises(ValidationError):
        normalize_filters(raw)


@pytest.mark.parametrize("page", [0, -1, "x"])
def test_invalid_page_raises(page):
    with pytest.raises(ValidationError):
        build_query(SCOPE, page=page)


def test_missing_page_defaults_to_first():
    assert build_query(SCOPE, page=None).page == 1
    assert build_query(SCOPE, page="").page == 1


def test_unknown_view_raises():
    with pytest.raises(ValidationError):
        build_query(SCOPE, view="calendar")


def test_cache_key_separates_views_and_pages():
    q = build_query(SCOPE, search=" cs5 ")
    assert q.search == "cs5"
    assert q.cache_key() != q.with_page(2).cache_key()
    board = build_query(SCOPE, search="cs5", view=VIEW_DISTRIBUTION_BOARD)
    assert q.cache_key() != board.cache_key()


def test_page_count_and_bounds():
    assert PageResult(items=[], total_count=25).page_count(10) == 3
    assert PageResult(items=[], total_count=0).page_count(10) == 0
    assert page_bounds(3, 10) == (20, 30)
