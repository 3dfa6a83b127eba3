"""Pagination metadata for search result pages."""

import math

from pydantic import BaseModel


def offset_for(page: int, limit: int) -> int:
    """Number of rows to skip to reach a 1-based page."""
    return (page - 1) * limit


class Pagination(BaseModel):
    """Position of a result page within the full match set."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        """Derive page counts and navigation flags from a fresh total.

        Args:
            page: 1-based page number that was requested
            limit: Page size
            total: Number of tutors matching the search

        Returns:
            Pagination metadata
        """
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )
