"""Pagination metadata shared by list queries."""

from __future__ import annotations

import math

from bookstore.application.dto import PaginationDTO
from bookstore.domain.exceptions import ValidationError


def pagination_metadata(page: int, limit: int, total: int) -> PaginationDTO:
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if limit < 1:
        raise ValidationError("Limit must be at least 1")
    return PaginationDTO(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_items=total,
        items_per_page=limit,
        has_next_page=page * limit < total,
        has_previous_page=page > 1,
    )
