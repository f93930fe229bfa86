import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Any, Dict, List

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections
from django.utils import timezone

from accounts.models import Role
from accounts.permissions import RoleIn, enforce
from common.exceptions import BackendUnavailable
from .compiler import compile_listing

logger = logging.getLogger(__name__)

ADMIN_ONLY = RoleIn.of(Role.ADMIN)


@dataclass
class Page:
    items: List[Dict[str, Any]]
    pagination: Dict[str, Any]
    applied_filters: Dict[str, Any] = field(default_factory=dict)

    def as_response(self, collection_key):
        return {
            collection_key: self.items,
            "pagination": self.pagination,
            "filters": self.applied_filters,
        }


def build_pagination(page, page_size, total_count, total_pages):
    return {
        "currentPage": page,
        "pageSize": page_size,
        "totalPages": total_pages,
        "totalCount": total_count,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def _adapt_param(connection, value):
    if isinstance(value, datetime):
        return connection.ops.adapt_datetimefield_value(value)
    return value


def _clean_value(value):
    # 백엔드마다 다른 raw 값을 통일 (sqlite 는 naive datetime 을 돌려줌)
    if isinstance(value, datetime) and settings.USE_TZ and timezone.is_naive(value):
        return timezone.make_aware(value, dt_timezone.utc)
    if isinstance(value, Decimal):
        return float(value)
    return value


def _fetch(connection, compiled):
    with connection.cursor() as cursor:
        cursor.execute(compiled.sql, [_adapt_param(connection, p) for p in compiled.params])
        columns = [col[0] for col in cursor.description]
        return [
            {name: _clean_value(value) for name, value in zip(columns, row)}
            for row in cursor.fetchall()
        ]


def _fetch_count(connection, compiled):
    with connection.cursor() as cursor:
        cursor.execute(compiled.sql, [_adapt_param(connection, p) for p in compiled.params])
        return int(cursor.fetchone()[0])


def list_collection(schema, identity, params, shape=None, using=DEFAULT_DB_ALIAS):
    """
    권한 확인 -> 쿼리 컴파일 -> 개수/목록 조회 -> 페이지 봉투.
    페이지 범위를 넘으면 빈 목록을 돌려준다.
    """
    enforce(identity, ADMIN_ONLY, using=using)

    query = compile_listing(schema, params)
    connection = connections[using]

    try:
        total_count = _fetch_count(connection, query.count_query())
        total_pages = query.total_pages(total_count)
        if total_count and query.offset < total_count:
            rows = _fetch(connection, query.rows_query())
        else:
            rows = []
    except DatabaseError:
        logger.exception("Listing query failed for %s", schema.name)
        raise BackendUnavailable()

    items = [shape(row) for row in rows] if shape else rows

    filters = {
        "search": query.search,
        "searchBy": query.search_by,
        "sortBy": query.sort_by,
        "sortOrder": query.sort_order,
    }
    for definition in schema.filters:
        filters[definition.param] = query.applied_filters.get(definition.param, "")

    return Page(
        items=items,
        pagination=build_pagination(query.page, query.page_size, total_count, total_pages),
        applied_filters=filters,
    )


def shape_store_row(row):
    return {
        "id": row["id"],
        "name": row["name"],
        "email": row["email"],
        "address": row["address"],
        "average_rating": row["average_rating"],
        "total_ratings": row["total_ratings"],
        "created_at": row["created_at"],
        # 점주 없는 가게는 owner 필드가 모두 null
        "owner": {
            "id": row["owner_id"],
            "name": row["owner_name"],
            "email": row["owner_email"],
        },
    }
