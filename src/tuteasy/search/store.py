"""Query contract between the search engine and its data store."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol
from uuid import UUID

from tuteasy.db.models.tutor import Tutor
from tuteasy.search.predicate import TutorPredicate
from tuteasy.search.sorting import SortSpec


class SubjectField(str, Enum):
    """Subject attributes the store can group or de-duplicate on."""

    SUBJECT_NAME = "subject_name"
    QUALIFICATION_LEVEL = "qualification_level"


@dataclass(frozen=True)
class TutorAggregates:
    """Rate and rating aggregates over matching tutors.

    Each value is None when no matching tutor has a value for it.
    """

    min_rate: Decimal | None
    max_rate: Decimal | None
    avg_rating: Decimal | float | None


class TutorStore(Protocol):
    """Read-only tutor queries the search engine depends on.

    Every method restricts its rows to tutors matching the predicate, which
    always includes the eligibility gate.
    """

    async def count(self, predicate: TutorPredicate) -> int:
        """Count matching tutors."""
        ...

    async def find_page(
        self, predicate: TutorPredicate, sort: SortSpec, offset: int, limit: int
    ) -> list[Tutor]:
        """Fetch one ordered page with user, subjects and verified qualifications loaded."""
        ...

    async def aggregate(self, predicate: TutorPredicate) -> TutorAggregates:
        """Compute rate bounds and mean rating."""
        ...

    async def experience_values(self, predicate: TutorPredicate) -> list[int]:
        """Years of experience of every subject row of every matching tutor."""
        ...

    async def group_count(
        self, predicate: TutorPredicate, field: SubjectField, limit: int
    ) -> list[tuple[str, int]]:
        """Subject rows grouped by a field, most frequent first."""
        ...

    async def distinct(self, predicate: TutorPredicate, field: SubjectField) -> list[str]:
        """Distinct subject field values, ascending."""
        ...

    async def get(self, tutor_id: UUID, predicate: TutorPredicate) -> Tutor | None:
        """Load one matching tutor by id."""
        ...
