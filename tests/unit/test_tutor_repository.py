"""Unit tests for the tutor repository against an in-memory database."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from tuteasy.db.models.tutor import QualificationLevel
from tuteasy.db.repositories import TutorRepository
from tuteasy.search import (
    SearchRequest,
    SortBy,
    SortOrder,
    SubjectField,
    TutorPredicate,
    build_predicate,
    sort_spec_for,
)


@pytest.fixture
def repository(db_session: AsyncSession) -> TutorRepository:
    """Repository bound to the test session."""
    return TutorRepository(db_session)


def predicate_for(**criteria) -> TutorPredicate:
    """Compile search criteria into a predicate."""
    return build_predicate(SearchRequest(**criteria))


@pytest.mark.asyncio
class TestEligibilityGate:
    """Tests that every query only sees eligible tutors."""

    async def test_ineligible_tutors_are_excluded(self, repository, tutor_factory):
        """Test inactive, unverified and unconfirmed-email tutors never match."""
        eligible = await tutor_factory(bio="eligible")
        await tutor_factory(bio="inactive", is_active=False)
        await tutor_factory(bio="pending", verification_status="PENDING")
        await tutor_factory(bio="unconfirmed", email_verified=False)

        predicate = TutorPredicate.eligibility_only()
        tutors = await repository.find_page(
            predicate, sort_spec_for(SortBy.RELEVANCE, SortOrder.DESC), 0, 10
        )

        assert await repository.count(predicate) == 1
        assert [t.id for t in tutors] == [eligible.id]

    async def test_get_respects_gate(self, repository, tutor_factory):
        """Test loading an ineligible tutor by id returns None."""
        eligible = await tutor_factory()
        inactive = await tutor_factory(is_active=False)
        predicate = TutorPredicate.eligibility_only()

        assert (await repository.get(eligible.id, predicate)).id == eligible.id
        assert await repository.get(inactive.id, predicate) is None
        assert await repository.get(uuid7(), predicate) is None


@pytest.mark.asyncio
class TestSubjectFilter:
    """Tests for the subject and level filter."""

    async def test_subject_and_level_must_match_same_row(self, repository, tutor_factory):
        """Test names and levels are not satisfied by different subjects."""
        await tutor_factory(
            subjects=[
                {"subject_name": "Mathematics", "qualification_level": "GCSE"},
                {"subject_name": "Physics", "qualification_level": "A_LEVEL"},
            ]
        )
        match = await tutor_factory(
            subjects=[{"subject_name": "Mathematics", "qualification_level": "A_LEVEL"}]
        )

        predicate = predicate_for(
            subjects=["Mathematics"], levels=[QualificationLevel.A_LEVEL]
        )
        tutors = await repository.find_page(
            predicate, sort_spec_for(SortBy.RATING, SortOrder.DESC), 0, 10
        )

        assert [t.id for t in tutors] == [match.id]

    async def test_any_listed_subject_matches(self, repository, tutor_factory):
        """Test subjects are OR-matched."""
        await tutor_factory(subjects=[{"subject_name": "Chemistry"}])
        await tutor_factory(subjects=[{"subject_name": "Biology"}])
        await tutor_factory(subjects=[{"subject_name": "History"}])

        assert await repository.count(predicate_for(subjects=["Chemistry", "Biology"])) == 2

    async def test_subject_names_match_exactly(self, repository, tutor_factory):
        """Test subject names are not substring matched."""
        await tutor_factory(subjects=[{"subject_name": "Further Mathematics"}])

        assert await repository.count(predicate_for(subjects=["Mathematics"])) == 0

    async def test_tutor_counted_once_with_many_matching_subjects(
        self, repository, tutor_factory
    ):
        """Test a tutor with several matching subjects appears once."""
        await tutor_factory(
            subjects=[
                {"subject_name": "Physics", "qualification_level": "GCSE"},
                {"subject_name": "Physics", "qualification_level": "A_LEVEL"},
            ]
        )

        assert await repository.count(predicate_for(subjects=["Physics"])) == 1


@pytest.mark.asyncio
class TestOtherFilters:
    """Tests for availability, rate and keyword filters."""

    async def test_availability_overlap(self, repository, tutor_factory):
        """Test a tutor matches when any requested slot is offered."""
        evenings = await tutor_factory(availability=["weekday_evenings"])
        await tutor_factory(availability=["weekday_mornings"])
        await tutor_factory()

        predicate = predicate_for(availability=["weekday_evenings", "weekends"])
        tutors = await repository.find_page(
            predicate, sort_spec_for(SortBy.RELEVANCE, SortOrder.DESC), 0, 10
        )

        assert [t.id for t in tutors] == [evenings.id]

    async def test_rate_bounds(self, repository, tutor_factory):
        """Test min_rate bounds hourly_rate_min and max_rate bounds hourly_rate_max."""
        await tutor_factory(hourly_rate_min="15", hourly_rate_max="30")
        await tutor_factory(hourly_rate_min="25", hourly_rate_max="40")
        await tutor_factory(hourly_rate_min="35", hourly_rate_max="60")
        await tutor_factory()

        assert await repository.count(predicate_for(min_rate=Decimal("20"))) == 2
        assert await repository.count(predicate_for(max_rate=Decimal("40"))) == 2
        assert (
            await repository.count(predicate_for(min_rate=Decimal("20"), max_rate=Decimal("40")))
            == 1
        )

    async def test_keyword_phrase_in_bio(self, repository, tutor_factory):
        """Test the whole phrase is matched case-insensitively in the bio."""
        match = await tutor_factory(bio="Experienced Organic Chemistry tutor")
        await tutor_factory(bio="Organic gardening and chemistry of soils")

        tutors = await repository.find_page(
            predicate_for(keywords="organic chemistry"),
            sort_spec_for(SortBy.RELEVANCE, SortOrder.DESC),
            0,
            10,
        )

        assert [t.id for t in tutors] == [match.id]

    async def test_keyword_terms_in_subject_names(self, repository, tutor_factory):
        """Test each term is matched separately against subject names."""
        await tutor_factory(subjects=[{"subject_name": "Further Mathematics"}])
        await tutor_factory(subjects=[{"subject_name": "Physics"}])
        await tutor_factory(subjects=[{"subject_name": "History"}])

        assert await repository.count(predicate_for(keywords="maths physics")) == 1
        assert await repository.count(predicate_for(keywords="mathematics physics")) == 2

    async def test_keyword_in_qualification(self, repository, tutor_factory):
        """Test qualification names and institutions are searched."""
        await tutor_factory(
            qualifications=[{"qualification_name": "PGCE", "institution": "UCL"}]
        )

        assert await repository.count(predicate_for(keywords="pgce")) == 1
        assert await repository.count(predicate_for(keywords="ucl")) == 1

    async def test_keyword_wildcards_are_literal(self, repository, tutor_factory):
        """Test LIKE wildcards in keywords match only themselves."""
        await tutor_factory(bio="Improved grades by 20% on average")
        await tutor_factory(bio="Improved grades by 200 points")

        assert await repository.count(predicate_for(keywords="20%")) == 1
        assert await repository.count(predicate_for(keywords="by_2")) == 0


@pytest.mark.asyncio
class TestSorting:
    """Tests for result ordering."""

    async def test_rate_ascending_with_newest_tie_break(self, repository, tutor_factory):
        """Test ascending rate order with created_at descending on ties."""
        older = await tutor_factory(
            hourly_rate_min="20", created_at=datetime(2024, 1, 1, tzinfo=UTC)
        )
        newer = await tutor_factory(
            hourly_rate_min="20", created_at=datetime(2024, 6, 1, tzinfo=UTC)
        )
        cheapest = await tutor_factory(
            hourly_rate_min="10", created_at=datetime(2023, 1, 1, tzinfo=UTC)
        )
        no_rate = await tutor_factory(created_at=datetime(2025, 1, 1, tzinfo=UTC))

        tutors = await repository.find_page(
            TutorPredicate.eligibility_only(),
            sort_spec_for(SortBy.HOURLY_RATE_MIN, SortOrder.ASC),
            0,
            10,
        )

        assert [t.id for t in tutors] == [cheapest.id, newer.id, older.id, no_rate.id]

    async def test_experience_uses_longest_subject(self, repository, tutor_factory):
        """Test experience sort uses each tutor's maximum subject experience."""
        veteran = await tutor_factory(
            subjects=[
                {"subject_name": "Physics", "years_experience": 2},
                {"subject_name": "Maths", "years_experience": 12},
            ]
        )
        junior = await tutor_factory(subjects=[{"subject_name": "Maths", "years_experience": 1}])
        middle = await tutor_factory(subjects=[{"subject_name": "Maths", "years_experience": 7}])

        tutors = await repository.find_page(
            TutorPredicate.eligibility_only(),
            sort_spec_for(SortBy.EXPERIENCE, SortOrder.DESC),
            0,
            10,
        )

        assert [t.id for t in tutors] == [veteran.id, middle.id, junior.id]

    async def test_rating_then_students(self, repository, tutor_factory):
        """Test rating ties are broken by total students."""
        popular = await tutor_factory(rating="4.5", total_students=40)
        best = await tutor_factory(rating="4.9", total_students=2)
        quiet = await tutor_factory(rating="4.5", total_students=5)

        tutors = await repository.find_page(
            TutorPredicate.eligibility_only(),
            sort_spec_for(SortBy.RATING, SortOrder.DESC),
            0,
            10,
        )

        assert [t.id for t in tutors] == [best.id, popular.id, quiet.id]

    async def test_offset_and_limit(self, repository, tutor_factory):
        """Test pages are windows over the ordered result."""
        created = [
            await tutor_factory(rating=f"{rating}.0", total_students=0)
            for rating in (1, 2, 3, 4, 5)
        ]

        page = await repository.find_page(
            TutorPredicate.eligibility_only(),
            sort_spec_for(SortBy.RATING, SortOrder.DESC),
            2,
            2,
        )

        assert [t.id for t in page] == [created[2].id, created[1].id]


@pytest.mark.asyncio
class TestLoadedRelations:
    """Tests for relations loaded with each tutor."""

    async def test_only_verified_qualifications_loaded(self, repository, tutor_factory):
        """Test unverified qualifications are not loaded onto results."""
        tutor = await tutor_factory(
            qualifications=[
                {"qualification_name": "BSc Physics"},
                {"qualification_name": "PGCE", "verification_status": "PENDING"},
            ]
        )

        loaded = await repository.get(tutor.id, TutorPredicate.eligibility_only())

        assert [q.qualification_name for q in loaded.qualifications] == ["BSc Physics"]
        assert loaded.user.is_email_verified is True


@pytest.mark.asyncio
class TestAggregates:
    """Tests for statistics queries."""

    async def test_aggregate(self, repository, tutor_factory):
        """Test rate bounds and mean rating over matching tutors."""
        await tutor_factory(hourly_rate_min="15", hourly_rate_max="30", rating="4.0")
        await tutor_factory(hourly_rate_min="25", hourly_rate_max="60", rating="5.0")
        await tutor_factory(hourly_rate_min="5", hourly_rate_max="90", is_active=False)

        aggregates = await repository.aggregate(TutorPredicate.eligibility_only())

        assert aggregates.min_rate == Decimal("15")
        assert aggregates.max_rate == Decimal("60")
        assert float(aggregates.avg_rating) == pytest.approx(4.5)

    async def test_aggregate_without_matches(self, repository):
        """Test aggregates are None over an empty set."""
        aggregates = await repository.aggregate(TutorPredicate.eligibility_only())

        assert aggregates.min_rate is None
        assert aggregates.max_rate is None
        assert aggregates.avg_rating is None

    async def test_experience_values_include_every_subject(self, repository, tutor_factory):
        """Test every subject row of matching tutors contributes."""
        await tutor_factory(
            subjects=[
                {"subject_name": "Maths", "years_experience": 3},
                {"subject_name": "Physics", "years_experience": 5},
            ]
        )
        await tutor_factory(subjects=[{"subject_name": "Maths", "years_experience": 2}])
        await tutor_factory(
            subjects=[{"subject_name": "Maths", "years_experience": 40}], is_active=False
        )

        values = await repository.experience_values(TutorPredicate.eligibility_only())

        assert sorted(values) == [2, 3, 5]

    async def test_group_count_orders_by_frequency(self, repository, tutor_factory):
        """Test subject groups are ordered by count then name and limited."""
        await tutor_factory(
            subjects=[{"subject_name": "Maths"}, {"subject_name": "Physics"}]
        )
        await tutor_factory(subjects=[{"subject_name": "Maths"}, {"subject_name": "Biology"}])
        await tutor_factory(subjects=[{"subject_name": "Maths"}])

        groups = await repository.group_count(
            TutorPredicate.eligibility_only(), SubjectField.SUBJECT_NAME, 2
        )

        assert groups == [("Maths", 3), ("Biology", 1)]

    async def test_group_count_respects_predicate(self, repository, tutor_factory):
        """Test only subjects of matching tutors are grouped."""
        await tutor_factory(subjects=[{"subject_name": "Maths"}], availability=["weekends"])
        await tutor_factory(subjects=[{"subject_name": "Physics"}])

        groups = await repository.group_count(
            predicate_for(availability=["weekends"]), SubjectField.SUBJECT_NAME, 10
        )

        assert groups == [("Maths", 1)]

    async def test_distinct_values_sorted(self, repository, tutor_factory):
        """Test distinct subject names and levels come back ascending."""
        await tutor_factory(
            subjects=[
                {"subject_name": "Physics", "qualification_level": "A_LEVEL"},
                {"subject_name": "Biology", "qualification_level": "GCSE"},
            ]
        )
        await tutor_factory(subjects=[{"subject_name": "Physics", "qualification_level": "GCSE"}])
        await tutor_factory(subjects=[{"subject_name": "Art"}], is_active=False)

        predicate = TutorPredicate.eligibility_only()

        assert await repository.distinct(predicate, SubjectField.SUBJECT_NAME) == [
            "Biology",
            "Physics",
        ]
        assert await repository.distinct(predicate, SubjectField.QUALIFICATION_LEVEL) == [
            "A_LEVEL",
            "GCSE",
        ]
