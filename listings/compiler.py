"""
목록 조회 쿼리 컴파일러.

신뢰할 수 없는 페이지/정렬/검색/필터 파라미터를 받아 같은 WHERE 조건을 공유하는
두 개의 파라미터화된 쿼리(목록 쿼리, 개수 쿼리)를 만든다.

* 정렬/검색 컬럼은 스키마의 허용 목록에서 찾은 리터럴만 SQL 에 들어간다.
  호출자가 보낸 문자열은 식별자로 절대 쓰지 않는다.
* 모든 값은 ``%s`` 자리표시자로만 전달된다.
* 두 쿼리는 같은 조건 목록에서 각자 새 파라미터 리스트를 만든다.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from django.utils import timezone
from django.utils.dateparse import parse_date

ASC = "asc"
DESC = "desc"

END_OF_DAY = time(23, 59, 59, 999999)


# ── 값 변환 (실패 시 ValueError -> 해당 조건 생략) ─────────

def as_float(raw):
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {raw!r}")
    return value


def as_day_start(raw):
    day = parse_date(str(raw).strip())
    if day is None:
        raise ValueError(f"not a date: {raw!r}")
    return timezone.make_aware(datetime.combine(day, time.min))


def as_day_end(raw):
    # dateTo 는 그 날 하루 전체 포함
    day = parse_date(str(raw).strip())
    if day is None:
        raise ValueError(f"not a date: {raw!r}")
    return timezone.make_aware(datetime.combine(day, END_OF_DAY))


# ── 스키마 ────────────────────────────────────────────

@dataclass(frozen=True)
class FilterDefinition:
    param: str
    column: str
    comparison: str  # "=", ">=", "<="
    coerce: Callable[[str], Any] = str


@dataclass(frozen=True)
class ListingSchema:
    name: str
    select_sql: str        # SELECT ... FROM ... (JOIN 포함, WHERE 없음)
    count_sql: str         # SELECT COUNT(*) FROM ...
    primary_key: str
    sortable_fields: Mapping[str, str]      # 공개 이름 -> 컬럼 리터럴
    searchable_fields: Mapping[str, str]
    default_sort: str
    default_search: str
    filters: Tuple[FilterDefinition, ...] = ()
    default_page_size: int = 10
    max_page_size: Optional[int] = None  # None 이면 상한 없음


# ── 컴파일 결과 ────────────────────────────────────────

@dataclass(frozen=True)
class Predicate:
    sql: str   # 자리표시자 하나를 가진 조건식
    value: Any


@dataclass(frozen=True)
class CompiledQuery:
    sql: str
    params: List[Any]


@dataclass(frozen=True)
class ListingQuery:
    schema: ListingSchema
    sort_by: str
    sort_order: str
    search: str
    search_by: str
    page: int
    page_size: int
    predicates: Tuple[Predicate, ...]
    applied_filters: Dict[str, str] = field(default_factory=dict)

    @property
    def offset(self):
        return max(0, (self.page - 1) * self.page_size)

    def _where(self):
        if not self.predicates:
            return "", []
        clause = " WHERE " + " AND ".join(p.sql for p in self.predicates)
        return clause, [p.value for p in self.predicates]

    def rows_query(self):
        where, params = self._where()
        sort_column = self.schema.sortable_fields[self.sort_by]
        direction = "DESC" if self.sort_order == DESC else "ASC"
        sql = (
            f"{self.schema.select_sql}{where}"
            f" ORDER BY {sort_column} {direction}, {self.schema.primary_key} ASC"
            " LIMIT %s OFFSET %s"
        )
        params.extend([self.page_size, self.offset])
        return CompiledQuery(sql, params)

    def count_query(self):
        where, params = self._where()
        return CompiledQuery(f"{self.schema.count_sql}{where}", params)

    def total_pages(self, total_count):
        return math.ceil(total_count / self.page_size) if total_count > 0 else 0


# ── 컴파일 ─────────────────────────────────────────────

def _first(params, key):
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return ""
    return str(value).strip()


def _positive_int(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


LIKE_ESCAPE = "!"


def escape_like(term):
    # 검색어 안의 %, _ 는 와일드카드가 아닌 글자 그대로 비교
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return term


def _pick(raw, allowed, default):
    return raw if raw in allowed else default


def compile_listing(schema, params):
    """
    schema + 원본 파라미터(QueryDict 또는 dict) -> ListingQuery.

    허용되지 않는 sortBy/searchBy/sortOrder 는 조용히 기본값으로 대체된다.
    변환에 실패한 필터 값은 무시된다.
    """
    params = params or {}

    page = _positive_int(_first(params, "page"), 1)
    page_size = _positive_int(_first(params, "limit"), schema.default_page_size)
    if schema.max_page_size is not None:
        page_size = min(page_size, schema.max_page_size)

    sort_by = _pick(_first(params, "sortBy"), schema.sortable_fields, schema.default_sort)
    sort_order = _first(params, "sortOrder").lower()
    if sort_order not in (ASC, DESC):
        sort_order = ASC
    search_by = _pick(_first(params, "searchBy"), schema.searchable_fields, schema.default_search)
    search = _first(params, "search")

    predicates = []
    applied = {}
    for definition in schema.filters:
        raw = _first(params, definition.param)
        if not raw:
            continue
        try:
            value = definition.coerce(raw)
        except (TypeError, ValueError):
            continue
        predicates.append(Predicate(f"{definition.column} {definition.comparison} %s", value))
        applied[definition.param] = raw

    if search:
        column = schema.searchable_fields[search_by]
        predicates.append(
            Predicate(f"LOWER({column}) LIKE LOWER(%s) ESCAPE '{LIKE_ESCAPE}'", f"%{escape_like(search)}%")
        )

    return ListingQuery(
        schema=schema,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        search_by=search_by,
        page=page,
        page_size=page_size,
        predicates=tuple(predicates),
        applied_filters=applied,
    )
