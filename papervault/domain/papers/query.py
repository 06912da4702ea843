"""
조회 descriptor / 페이지 결과 — 캐시 키이자 repository 입력

filters는 정규화(타입 변환 + 중복 제거 + field 기준 정렬)해서 보관한다.
같은 조건을 다른 순서로 넘겨도 같은 캐시 엔트리를 공유해야 하기 때문.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Generic, Iterable, Optional, TypeVar

from papervault.domain.papers.entities import PaperStatus
from papervault.domain.papers.errors import ValidationError
from papervault.domain.papers.scope import AccessScope

T = TypeVar("T")

PAPERS_ENTITY_TAG = "exam_papers"

# 모든 목록 화면 공통
PAGE_SIZE = 12

# "전체" 선택 값: 필터 미적용
ALL_SENTINEL = "all"

VIEW_LIST = "list"
VIEW_DISTRIBUTION_BOARD = "distribution_board"
VIEWS = (VIEW_LIST, VIEW_DISTRIBUTION_BOARD)


def _to_int(field_name: str, value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _to_status(field_name: str, value: Any) -> PaperStatus:
    try:
        return PaperStatus(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _to_date(field_name: str, value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _to_text(field_name: str, value: Any) -> str:
    return str(value).strip()


# 필터 가능한 컬럼 → 값 변환기
FILTER_FIELDS = {
    "academic_year": _to_int,
    "semester": _to_int,
    "status": _to_status,
    "department_name": _to_text,
    "exam_date": _to_date,
}


@dataclass(frozen=True, order=True)
class PaperFilter:
    field: str
    value: Any = field(compare=False)
    # 정렬/비교용 문자열 표현
    sort_value: str = ""

    @classmethod
    def of(cls, field_name: str, value: Any) -> "PaperFilter":
        if isinstance(value, PaperStatus):
            text = value.value
        elif isinstance(value, date):
            text = value.isoformat()
        else:
            text = str(value)
        return cls(field=field_name, value=value, sort_value=text)

    def as_pair(self) -> tuple[str, Any]:
        return self.field, self.value


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    text = str(value).strip()
    return text == "" or text.lower() == ALL_SENTINEL


def normalize_filters(filters: Optional[Iterable[Any]]) -> tuple[PaperFilter, ...]:
    """
    dict({"field","value"}) / (field, value) / PaperFilter 모두 허용.
    빈 값·"all"은 no-op으로 제거. 알 수 없는 field나 변환 불가 값은 ValidationError.
    """
    if not filters:
        return ()
    normalized: set[PaperFilter] = set()
    for raw in filters:
        if isinstance(raw, PaperFilter):
            field_name, value = raw.field, raw.value
        elif isinstance(raw, dict):
            field_name, value = raw.get("field"), raw.get("value")
        elif isinstance(raw, (tuple, list)) and len(raw) == 2:
            field_name, value = raw
        else:
            raise ValidationError(f"Malformed filter: {raw!r}")

        if not field_name:
            raise ValidationError(f"Filter without field: {raw!r}")
        if _is_blank(value):
            continue
        converter = FILTER_FIELDS.get(field_name)
        if converter is None:
            raise ValidationError(f"Unsupported filter field: {field_name}")
        normalized.add(PaperFilter.of(field_name, converter(field_name, value)))
    return tuple(sorted(normalized))


@dataclass(frozen=True)
class QueryDescriptor:
    """
    목록 조회 키. 모든 구성요소가 같으면 같은 descriptor (filters는 집합 비교).
    """
    scope: AccessScope
    filters: tuple[PaperFilter, ...] = ()
    search: str = ""
    page: int = 1
    entity_tag: str = PAPERS_ENTITY_TAG
    view: str = VIEW_LIST

    def with_page(self, page: int) -> "QueryDescriptor":
        return QueryDescriptor(
            scope=self.scope,
            filters=self.filters,
            search=self.search,
            page=page,
            entity_tag=self.entity_tag,
            view=self.view,
        )

    def filter_value(self, field_name: str) -> Any:
        for f in self.filters:
            if f.field == field_name:
                return f.value
        return None

    def cache_key(self) -> str:
        filters = "&".join(f"{f.field}={f.sort_value}" for f in self.filters)
        return (
            f"{self.entity_tag}:{self.view}:{self.scope.cache_token()}"
            f":f[{filters}]:s[{self.search}]:p{self.page}"
        )


def build_query(
    scope: AccessScope,
    filters: Optional[Iterable[Any]] = None,
    search: Optional[str] = "",
    page: Any = 1,
    view: str = VIEW_LIST,
    entity_tag: str = PAPERS_ENTITY_TAG,
) -> QueryDescriptor:
    """UI 파라미터 → 정규화된 QueryDescriptor. page 누락 시 1."""
    if page in (None, ""):
        page = 1
    try:
        page_no = int(page)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid page: {page!r}")
    if page_no < 1:
        raise ValidationError(f"Invalid page: {page!r}")
    if view not in VIEWS:
        raise ValidationError(f"Unknown view: {view}")

    return QueryDescriptor(
        scope=scope,
        filters=normalize_filters(filters),
        search=(search or "").strip(),
        page=page_no,
        entity_tag=entity_tag,
        view=view,
    )


@dataclass
class PageResult(Generic[T]):
    items: list[T]
    total_count: int

    def page_count(self, page_size: int = PAGE_SIZE) -> int:
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / page_size)


def page_bounds(page: int, page_size: int = PAGE_SIZE) -> tuple[int, int]:
    """(offset, end) — end는 slice 끝(미포함)."""
    offset = (page - 1) * page_size
    return offset, offset + page_size
