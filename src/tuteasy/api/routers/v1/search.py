"""Tutor search API endpoints.

This module provides REST API endpoints for tutor discovery:
- GET /v1/search/tutors - Search and rank tutors
- GET /v1/search/tutors/statistics - Aggregate statistics for a search
- GET /v1/search/tutors/{tutor_id} - Details of one eligible tutor
- GET /v1/search/filters - Available subject and level filter values
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends

from tuteasy.api.dependencies import get_search_engine, get_search_request
from tuteasy.api.schemas.errors import APIError
from tuteasy.search.engine import TutorSearchEngine
from tuteasy.search.models import (
    FilterOptions,
    SearchRequest,
    SearchResultPage,
    SearchStatistics,
    TutorSearchResult,
)
from tuteasy.utils.exceptions import TutorNotFoundError

logger = structlog.get_logger()

router = APIRouter(prefix="/search", tags=["search"])


@router.get(
    "/tutors",
    response_model=SearchResultPage,
    summary="Search tutors",
    description=(
        "Filter eligible tutors by subject, level, availability, rate and keywords. "
        "With keywords, each result carries a relevance score."
    ),
    responses={422: {"model": APIError, "description": "Invalid search parameters"}},
)
async def search_tutors(
    search_request: Annotated[SearchRequest, Depends(get_search_request)],
    engine: Annotated[TutorSearchEngine, Depends(get_search_engine)],
) -> SearchResultPage:
    """Return one page of matching tutors."""
    return await engine.search_tutors(search_request)


@router.get(
    "/tutors/statistics",
    response_model=SearchStatistics,
    summary="Search statistics",
    description=(
        "Aggregates over every tutor matching the search, including the availability "
        "and rate filters. Paging is ignored."
    ),
    responses={422: {"model": APIError, "description": "Invalid search parameters"}},
)
async def get_search_statistics(
    search_request: Annotated[SearchRequest, Depends(get_search_request)],
    engine: Annotated[TutorSearchEngine, Depends(get_search_engine)],
) -> SearchStatistics:
    """Return totals, averages, price range and popular subjects.

    Every search filter applies, so availability and rate bounds narrow the
    statistics exactly as they narrow the result list.
    """
    return await engine.get_search_statistics(search_request)


@router.get(
    "/tutors/{tutor_id}",
    response_model=TutorSearchResult,
    summary="Tutor details",
    responses={404: {"model": APIError, "description": "Tutor not found"}},
)
async def get_tutor_details(
    tutor_id: UUID,
    engine: Annotated[TutorSearchEngine, Depends(get_search_engine)],
) -> TutorSearchResult:
    """Return a single eligible tutor.

    Raises:
        TutorNotFoundError: If the tutor does not exist or is not searchable
    """
    result = await engine.get_tutor_details(tutor_id)
    if result is None:
        logger.info("Tutor details requested for unknown tutor", tutor_id=str(tutor_id))
        raise TutorNotFoundError(tutor_id)
    return result


@router.get(
    "/filters",
    response_model=FilterOptions,
    summary="Filter options",
    description="Distinct subject names and qualification levels offered by eligible tutors.",
)
async def get_filter_options(
    engine: Annotated[TutorSearchEngine, Depends(get_search_engine)],
) -> FilterOptions:
    """Return values for the subject and level filters."""
    return await engine.get_filter_options()
