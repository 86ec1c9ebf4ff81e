"""Pagination metadata."""

from __future__ import annotations

from typing import Any

from possync._normalize import to_int
from possync.models.pagination import Pagination


def calculate_pagination(page: Any = 1, limit: Any = 10, total_count: Any = 0) -> Pagination:
    page_no = to_int(page)
    page_size = to_int(limit)
    total = max(to_int(total_count), 0)

    total_pages = -(-total // page_size) if page_size > 0 else 0
    return Pagination(
        page=page_no,
        limit=page_size,
        offset=(page_no - 1) * page_size,
        total_pages=total_pages,
        total_count=total,
        has_next=page_no < total_pages,
        has_prev=page_no > 1,
    )
