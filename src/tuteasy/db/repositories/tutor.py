"""Tutor repository implementing the search store queries."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from tuteasy.db.models.tutor import Tutor, TutorQualification, TutorSubject, VerificationStatus
from tuteasy.db.queries.tutor import compile_predicate, compile_sort, matching_tutor_ids
from tuteasy.db.repositories.base import BaseRepository
from tuteasy.search.predicate import TutorPredicate
from tuteasy.search.sorting import SortSpec
from tuteasy.search.store import SubjectField, TutorAggregates


def _result_load_options():
    """Eager loads needed to build a search result without further I/O."""
    return (
        selectinload(Tutor.user),
        selectinload(Tutor.subjects),
        selectinload(
            Tutor.qualifications.and_(
                TutorQualification.verification_status == VerificationStatus.VERIFIED.value
            )
        ),
    )


class TutorRepository(BaseRepository[Tutor, UUID]):
    """Read-only tutor queries used by the search engine.

    Every query is restricted by a compiled predicate, which always carries
    the eligibility gate.
    """

    model = Tutor

    async def count(self, predicate: TutorPredicate) -> int:
        """Count tutors matching a predicate."""
        stmt = select(func.count(self._get_pk_column())).where(compile_predicate(predicate))
        return await self._scalar(stmt) or 0

    async def find_page(
        self,
        predicate: TutorPredicate,
        sort: SortSpec,
        offset: int,
        limit: int,
    ) -> list[Tutor]:
        """Fetch one ordered page of matching tutors.

        Args:
            predicate: Search predicate
            sort: Sort keys, most significant first
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tutors with user, subjects and verified qualifications loaded
        """
        stmt = (
            select(Tutor)
            .where(compile_predicate(predicate))
            .order_by(*compile_sort(sort))
            .offset(offset)
            .limit(limit)
            .options(*_result_load_options())
            .execution_options(populate_existing=True)
        )
        return await self._all(stmt)

    async def aggregate(self, predicate: TutorPredicate) -> TutorAggregates:
        """Lowest minimum rate, highest maximum rate and mean rating."""
        stmt = select(
            func.min(Tutor.hourly_rate_min),
            func.max(Tutor.hourly_rate_max),
            func.avg(Tutor.rating),
        ).where(compile_predicate(predicate))
        result = await self.db.execute(stmt)
        min_rate, max_rate, avg_rating = result.one()
        return TutorAggregates(min_rate=min_rate, max_rate=max_rate, avg_rating=avg_rating)

    async def experience_values(self, predicate: TutorPredicate) -> list[int]:
        """Years of experience of every subject row of every matching tutor."""
        stmt = select(TutorSubject.years_experience).where(
            TutorSubject.tutor_id.in_(matching_tutor_ids(predicate))
        )
        return await self._all(stmt)

    async def group_count(
        self,
        predicate: TutorPredicate,
        field: SubjectField,
        limit: int,
    ) -> list[tuple[str, int]]:
        """Count matching tutors' subject rows per field value.

        Args:
            predicate: Search predicate
            field: Subject column to group by
            limit: Maximum groups to return

        Returns:
            (value, count) pairs ordered by count descending, then value
        """
        column = getattr(TutorSubject, field.value)
        row_count = func.count(TutorSubject.id)
        stmt = (
            select(column, row_count)
            .where(TutorSubject.tutor_id.in_(matching_tutor_ids(predicate)))
            .group_by(column)
            .order_by(row_count.desc(), column.asc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [(value, count) for value, count in result.all()]

    async def distinct(self, predicate: TutorPredicate, field: SubjectField) -> list[str]:
        """Distinct values of a subject column over matching tutors, ascending."""
        column = getattr(TutorSubject, field.value)
        stmt = (
            select(column)
            .where(TutorSubject.tutor_id.in_(matching_tutor_ids(predicate)))
            .distinct()
            .order_by(column.asc())
        )
        return await self._all(stmt)

    async def get(self, tutor_id: UUID, predicate: TutorPredicate) -> Tutor | None:
        """Load one tutor by id if it matches the predicate.

        Args:
            tutor_id: Tutor to load
            predicate: Predicate the tutor must satisfy

        Returns:
            Tutor with user, subjects and verified qualifications loaded, or None
        """
        stmt = (
            select(Tutor)
            .where(Tutor.id == tutor_id, compile_predicate(predicate))
            .options(*_result_load_options())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
