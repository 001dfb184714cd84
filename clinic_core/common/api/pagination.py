from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from django.db.models import QuerySet
from rest_framework import serializers
from rest_framework.response import Response

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


class PageQuerySerializer(serializers.Serializer):
    """
    `page` / `limit` query contract shared by list endpoints.
    """
    page = serializers.IntegerField(
        required=False,
        min_value=1,
        default=1,
        help_text="1-based page number.",
    )
    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=MAX_PAGE_SIZE,
        default=DEFAULT_PAGE_SIZE,
        help_text=f"Page size, 1 to {MAX_PAGE_SIZE} (default {DEFAULT_PAGE_SIZE}). Larger values are rejected with validation_error.",
    )


@dataclass(frozen=True)
class Page:
    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def paginate_queryset(queryset: QuerySet, *, page: int, limit: int) -> Page:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")

    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])
    return Page(items=items, total=total, page=page, limit=limit)


def paginated_response(page: Page, serializer_class) -> Response:
    """
    Stable list contract:
      { success, data, total, currentPage, totalPages }
    """
    return Response(
        {
            "success": True,
            "data": serializer_class(page.items, many=True).data,
            "total": page.total,
            "currentPage": page.page,
            "totalPages": page.total_pages,
        }
    )
