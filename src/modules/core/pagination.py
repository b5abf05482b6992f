"""Page-number pagination shared by the list endpoints.

Out-of-range or non-numeric query values never raise: ``page`` is clamped
to ``1..max_page`` and ``perPage`` to ``1..max_page_size``, falling back to
the defaults when the value cannot be parsed.  A page past the end simply
comes back empty.

Response shape::

    {
        "<results_key>": [...],
        "pagination": {
            "currentPage": 1,
            "perPage": 16,
            "totalItems": 42,
            "totalPages": 3
        }
    }
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from rest_framework.pagination import BasePagination
from rest_framework.request import Request
from rest_framework.response import Response


def _int_param(request: Request, name: Optional[str], default: int) -> int:
    if not name:
        return default
    raw = request.query_params.get(name)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value or default


class StandardResultsSetPagination(BasePagination):
    page_size = 16
    max_page_size = 100
    max_page = 1000
    page_query_param = "page"
    page_size_query_param: Optional[str] = "perPage"
    results_key = "results"

    def paginate_queryset(self, queryset, request: Request, view=None) -> List[Any]:
        page = _int_param(request, self.page_query_param, 1)
        per_page = _int_param(request, self.page_size_query_param, self.page_size)

        self.page = max(1, min(page, self.max_page))
        self.per_page = max(1, min(per_page, self.max_page_size))
        self.total_items = queryset.count()

        offset = (self.page - 1) * self.per_page
        return list(queryset[offset : offset + self.per_page])

    def get_pagination_block(self) -> dict:
        return {
            "currentPage": self.page,
            "perPage": self.per_page,
            "totalItems": self.total_items,
            "totalPages": max(1, math.ceil(self.total_items / self.per_page)),
        }

    def get_paginated_response(self, data) -> Response:
        return Response(
            {self.results_key: data, "pagination": self.get_pagination_block()}
        )

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "properties": {
                self.results_key: schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "currentPage": {"type": "integer"},
                        "perPage": {"type": "integer"},
                        "totalItems": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                    },
                },
            },
        }
