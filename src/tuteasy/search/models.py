"""Request and response models for tutor search."""

from decimal import Decimal
from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints, ValidationInfo, field_validator

from tuteasy.config.settings import get_settings
from tuteasy.db.models.tutor import QualificationLevel
from tuteasy.search.pagination import Pagination


class SortBy(str, Enum):
    """Field a result page is ordered by."""

    RELEVANCE = "relevance"
    EXPERIENCE = "experience"
    HOURLY_RATE_MIN = "hourly_rate_min"
    HOURLY_RATE_MAX = "hourly_rate_max"
    RATING = "rating"

    @classmethod
    def _missing_(cls, value: object) -> "SortBy | None":
        # Accept camelCase spellings such as "hourlyRateMin".
        if not isinstance(value, str):
            return None
        snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in value)
        for member in cls:
            if member.value == snake:
                return member
        return None


class SortOrder(str, Enum):
    """Direction of the primary sort key."""

    ASC = "asc"
    DESC = "desc"


SubjectName = Annotated[str, StringConstraints(min_length=1, max_length=100)]


def _default_page_size() -> int:
    return get_settings().search.default_page_size


class SearchRequest(BaseModel):
    """Validated tutor search criteria.

    Every filter is optional; an empty request returns all eligible tutors.
    List-valued filters are OR-matched within themselves and AND-combined
    with the other filters.
    """

    subjects: list[SubjectName] | None = None
    levels: list[QualificationLevel] | None = None
    keywords: str | None = Field(default=None, max_length=255)
    availability: list[str] | None = None
    min_rate: Decimal | None = Field(default=None, ge=0)
    max_rate: Decimal | None = Field(default=None, ge=0)
    sort_by: SortBy = SortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default_factory=_default_page_size, ge=1)

    @field_validator("limit")
    @classmethod
    def limit_within_max_page_size(cls, value: int, info: ValidationInfo) -> int:
        """Reject page sizes above the configured maximum.

        The bound comes from the ``max_page_size`` validation context when
        given, otherwise from the environment settings.
        """
        context = info.context or {}
        max_page_size = context.get("max_page_size") or get_settings().search.max_page_size
        if value > max_page_size:
            raise ValueError(f"limit must be less than or equal to {max_page_size}")
        return value

    @property
    def has_keywords(self) -> bool:
        """Whether the keyword string contains anything besides whitespace."""
        return bool(self.keywords and self.keywords.strip())


# =============================================================================
# Results
# =============================================================================


class UserSummary(BaseModel):
    """Public view of the account that owns a tutor profile."""

    id: UUID
    email: str
    role: str


class SubjectResult(BaseModel):
    """A subject entry on a tutor search result."""

    id: UUID
    subject_name: str
    qualification_level: str
    proficiency_level: str
    years_experience: int
    hourly_rate: float | None = None
    exam_boards: list[str] = Field(default_factory=list)
    ib_subject_group: str | None = None
    ib_language: str | None = None


class QualificationResult(BaseModel):
    """A verified qualification on a tutor search result."""

    id: UUID
    qualification_type: str
    qualification_name: str
    institution: str | None = None
    verification_status: str


class TutorSearchResult(BaseModel):
    """Tutor profile as returned by search and details lookups."""

    id: UUID
    user_id: UUID
    user: UserSummary
    bio: str | None = None
    hourly_rate_min: float | None = None
    hourly_rate_max: float | None = None
    profile_image_url: str | None = None
    verification_status: str
    is_active: bool
    rating: float = 0.0
    total_students: int = 0
    language_proficiencies: list[str] = Field(default_factory=list)
    subjects: list[SubjectResult] = Field(default_factory=list)
    qualifications: list[QualificationResult] = Field(default_factory=list)
    experience_years: int = Field(
        default=0, description="Longest years of experience across the tutor's subjects"
    )
    relevance_score: float | None = Field(
        default=None, description="Keyword relevance; null when no keywords were given"
    )


class AppliedFilters(BaseModel):
    """Echo of the criteria a result page was computed with."""

    subjects: list[str] | None = None
    levels: list[QualificationLevel] | None = None
    availability: list[str] | None = None
    min_rate: float | None = None
    max_rate: float | None = None
    keywords: str | None = None
    sort_by: SortBy
    sort_order: SortOrder

    @classmethod
    def from_request(cls, request: SearchRequest) -> "AppliedFilters":
        """Copy the filter and sort fields of a request."""
        return cls(
            subjects=request.subjects,
            levels=request.levels,
            availability=request.availability,
            min_rate=float(request.min_rate) if request.min_rate is not None else None,
            max_rate=float(request.max_rate) if request.max_rate is not None else None,
            keywords=request.keywords,
            sort_by=request.sort_by,
            sort_order=request.sort_order,
        )


class SearchResultPage(BaseModel):
    """One page of tutor search results."""

    tutors: list[TutorSearchResult]
    pagination: Pagination
    filters: AppliedFilters


# =============================================================================
# Statistics and filter options
# =============================================================================


class PriceRange(BaseModel):
    """Lowest minimum rate and highest maximum rate among matching tutors."""

    min: float | None = None
    max: float | None = None


class PopularSubject(BaseModel):
    """Number of matching tutors' subject rows with a given name."""

    subject: str
    count: int


class SearchStatistics(BaseModel):
    """Aggregates over every tutor matching a search."""

    total_results: int
    average_experience: float
    average_rating: float
    price_range: PriceRange
    popular_subjects: list[PopularSubject]


class FilterOptions(BaseModel):
    """Values available for the subject and level filters."""

    subjects: list[str]
    qualification_levels: list[str]
