"""Sort specifications for tutor result pages."""

from dataclasses import dataclass
from enum import Enum

from tuteasy.search.models import SortBy, SortOrder


class SortField(str, Enum):
    """Tutor attributes a page can be ordered by."""

    EXPERIENCE = "experience"
    HOURLY_RATE_MIN = "hourly_rate_min"
    HOURLY_RATE_MAX = "hourly_rate_max"
    RATING = "rating"
    TOTAL_STUDENTS = "total_students"
    CREATED_AT = "created_at"


@dataclass(frozen=True)
class SortKey:
    """One ORDER BY term."""

    field: SortField
    direction: SortOrder


SortSpec = tuple[SortKey, ...]

_NEWEST_FIRST = SortKey(SortField.CREATED_AT, SortOrder.DESC)
_MOST_STUDENTS = SortKey(SortField.TOTAL_STUDENTS, SortOrder.DESC)

_PRIMARY_FIELDS: dict[SortBy, SortField] = {
    SortBy.EXPERIENCE: SortField.EXPERIENCE,
    SortBy.HOURLY_RATE_MIN: SortField.HOURLY_RATE_MIN,
    SortBy.HOURLY_RATE_MAX: SortField.HOURLY_RATE_MAX,
}


def sort_spec_for(sort_by: SortBy, sort_order: SortOrder) -> SortSpec:
    """Map a requested sort onto ordered sort keys.

    Relevance cannot be computed by the store, so it is approximated by
    rating and popularity here and refined per page after scoring. Its
    store ordering ignores ``sort_order``.

    Args:
        sort_by: Requested sort field
        sort_order: Requested direction of the primary key

    Returns:
        Sort keys, most significant first
    """
    if sort_by == SortBy.RELEVANCE:
        return (SortKey(SortField.RATING, SortOrder.DESC), _MOST_STUDENTS, _NEWEST_FIRST)
    if sort_by == SortBy.RATING:
        return (SortKey(SortField.RATING, sort_order), _MOST_STUDENTS, _NEWEST_FIRST)
    return (SortKey(_PRIMARY_FIELDS[sort_by], sort_order), _NEWEST_FIRST)
