"""Pagination metadata model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    limit: int
    offset: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool
