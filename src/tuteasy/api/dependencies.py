"""FastAPI dependencies for API endpoints."""

from decimal import Decimal
from typing import Annotated, Any

from fastapi import Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from tuteasy.config.settings import Settings, get_settings
from tuteasy.db.config import get_db
from tuteasy.db.dependencies import get_tutor_repository
from tuteasy.db.models.tutor import QualificationLevel
from tuteasy.db.repositories.tutor import TutorRepository
from tuteasy.search.engine import TutorSearchEngine
from tuteasy.search.models import SearchRequest, SortBy, SortOrder

# Re-export database dependencies for convenience
__all__ = [
    "get_db",
    "get_app_settings",
    "get_search_engine",
    "get_search_request",
]


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_search_engine(
    repository: Annotated[TutorRepository, Depends(get_tutor_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> TutorSearchEngine:
    """Get a search engine reading through the request's repository."""
    return TutorSearchEngine(repository, settings.search)


def get_search_request(
    settings: Annotated[Settings, Depends(get_app_settings)],
    subjects: Annotated[list[str] | None, Query(description="Subject names, OR-matched")] = None,
    levels: Annotated[
        list[QualificationLevel] | None, Query(description="Qualification levels, OR-matched")
    ] = None,
    keywords: Annotated[str | None, Query(description="Free-text keywords")] = None,
    availability: Annotated[
        list[str] | None, Query(description="Availability slots, any may match")
    ] = None,
    min_rate: Annotated[Decimal | None, Query(description="Lowest acceptable minimum rate")] = None,
    max_rate: Annotated[Decimal | None, Query(description="Highest acceptable maximum rate")] = None,
    sort_by: Annotated[SortBy, Query()] = SortBy.RELEVANCE,
    sort_order: Annotated[SortOrder, Query()] = SortOrder.DESC,
    page: Annotated[int, Query(description="1-based page number")] = 1,
    limit: Annotated[int | None, Query(description="Page size")] = None,
) -> SearchRequest:
    """Validate search query parameters into a SearchRequest.

    List filters are given as repeated keys, e.g.
    ``?subjects=Mathematics&subjects=Physics``. Page size defaults and
    limits come from the application settings.

    Raises:
        RequestValidationError: If any parameter violates the request rules
    """
    values: dict[str, Any] = {
        "subjects": subjects,
        "levels": levels,
        "keywords": keywords,
        "availability": availability,
        "min_rate": min_rate,
        "max_rate": max_rate,
        "sort_by": sort_by,
        "sort_order": sort_order,
        "page": page,
        "limit": limit if limit is not None else settings.search.default_page_size,
    }

    try:
        return SearchRequest.model_validate(
            values, context={"max_page_size": settings.search.max_page_size}
        )
    except ValidationError as exc:
        raise RequestValidationError(
            [{**error, "loc": ("query", *error["loc"])} for error in exc.errors()]
        ) from exc
