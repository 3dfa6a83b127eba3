"""Tutor search engine: filtering, paging, relevance ranking and statistics."""

from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog

from tuteasy.config.settings import SearchConfig, get_settings
from tuteasy.core.logging import LogContext
from tuteasy.db.models.tutor import ProficiencyLevel, Tutor, VerificationStatus
from tuteasy.observability.metrics import (
    observe_search_operation,
    record_relevance_rerank,
    record_search_results,
)
from tuteasy.observability.tracing import add_span_attributes, traced_async
from tuteasy.search.models import (
    AppliedFilters,
    FilterOptions,
    PopularSubject,
    PriceRange,
    QualificationResult,
    SearchRequest,
    SearchResultPage,
    SearchStatistics,
    SortBy,
    SortOrder,
    SubjectResult,
    TutorSearchResult,
    UserSummary,
)
from tuteasy.search.pagination import Pagination, offset_for
from tuteasy.search.predicate import TutorPredicate, build_predicate
from tuteasy.search.scoring import RelevanceScorer
from tuteasy.search.sorting import sort_spec_for
from tuteasy.search.store import SubjectField, TutorStore

logger = structlog.get_logger()

_TWO_PLACES = Decimal("0.01")


def _round2(value: float | Decimal) -> float:
    return float(Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _to_float(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


def _proficiency_rank(level: str) -> int:
    return ProficiencyLevel(level).rank


def to_search_result(tutor: Tutor) -> TutorSearchResult:
    """Project a loaded tutor record onto its public search result.

    Subjects are ordered by years of experience, then proficiency, both
    descending. Only verified qualifications are exposed.

    Args:
        tutor: Tutor with user, subjects and qualifications loaded

    Returns:
        Search result without a relevance score
    """
    subjects = sorted(
        tutor.subjects,
        key=lambda s: (s.years_experience, _proficiency_rank(s.proficiency_level)),
        reverse=True,
    )
    qualifications = [
        q
        for q in tutor.qualifications
        if q.verification_status == VerificationStatus.VERIFIED.value
    ]

    return TutorSearchResult(
        id=tutor.id,
        user_id=tutor.user_id,
        user=UserSummary(id=tutor.user.id, email=tutor.user.email, role=tutor.user.role),
        bio=tutor.bio,
        hourly_rate_min=_to_float(tutor.hourly_rate_min),
        hourly_rate_max=_to_float(tutor.hourly_rate_max),
        profile_image_url=tutor.profile_image_url,
        verification_status=tutor.verification_status,
        is_active=tutor.is_active,
        rating=float(tutor.rating or 0),
        total_students=tutor.total_students or 0,
        language_proficiencies=list(tutor.language_proficiencies or []),
        subjects=[
            SubjectResult(
                id=s.id,
                subject_name=s.subject_name,
                qualification_level=s.qualification_level,
                proficiency_level=s.proficiency_level,
                years_experience=s.years_experience,
                hourly_rate=_to_float(s.hourly_rate),
                exam_boards=list(s.exam_boards or []),
                ib_subject_group=s.ib_subject_group,
                ib_language=s.ib_language,
            )
            for s in subjects
        ],
        qualifications=[
            QualificationResult(
                id=q.id,
                qualification_type=q.qualification_type,
                qualification_name=q.qualification_name,
                institution=q.institution,
                verification_status=q.verification_status,
            )
            for q in qualifications
        ],
        experience_years=max((s.years_experience for s in subjects), default=0),
    )


class TutorSearchEngine:
    """Searches eligible tutors through a data store.

    The engine holds no state between calls; every operation re-reads the
    store. Store errors are logged and re-raised unchanged.

    Example:
        engine = TutorSearchEngine(TutorRepository(session))
        page = await engine.search_tutors(SearchRequest(subjects=["Mathematics"]))
    """

    def __init__(self, store: TutorStore, config: SearchConfig | None = None):
        """Initialize the engine.

        Args:
            store: Data store to query
            config: Search configuration (default: from settings)
        """
        self.store = store
        self.config = config or get_settings().search
        self.scorer = RelevanceScorer(self.config.relevance)

    @traced_async("search.search_tutors")
    async def search_tutors(self, request: SearchRequest) -> SearchResultPage:
        """Find one page of tutors matching a search request.

        When keywords are given every result carries a relevance score, and
        a relevance-sorted page is re-ordered by that score. Re-ordering
        never crosses page boundaries.

        Args:
            request: Validated search criteria

        Returns:
            Page of results with pagination metadata and the applied filters
        """
        predicate = build_predicate(request)
        sort = sort_spec_for(request.sort_by, request.sort_order)
        add_span_attributes(
            sort_by=request.sort_by, page=request.page, limit=request.limit
        )

        with (
            LogContext(operation="search_tutors"),
            observe_search_operation("search_tutors", request.sort_by.value),
        ):
            try:
                total = await self.store.count(predicate)
                tutors = await self.store.find_page(
                    predicate, sort, offset_for(request.page, request.limit), request.limit
                )
            except Exception as e:
                logger.error("Tutor search failed", error=str(e), sort_by=request.sort_by.value)
                raise

            results = [to_search_result(tutor) for tutor in tutors]

            if request.has_keywords:
                for result in results:
                    result.relevance_score = self.scorer.score(result, request.keywords)
                if request.sort_by == SortBy.RELEVANCE:
                    results.sort(
                        key=lambda r: r.relevance_score,
                        reverse=request.sort_order == SortOrder.DESC,
                    )
                    record_relevance_rerank()

            record_search_results("search_tutors", total)
            logger.info(
                "Tutor search complete",
                total=total,
                returned=len(results),
                page=request.page,
                sort_by=request.sort_by.value,
            )

        return SearchResultPage(
            tutors=results,
            pagination=Pagination.build(request.page, request.limit, total),
            filters=AppliedFilters.from_request(request),
        )

    @traced_async("search.get_search_statistics")
    async def get_search_statistics(self, request: SearchRequest) -> SearchStatistics:
        """Aggregate statistics over every tutor matching a search.

        All filters apply, availability and rates included. Paging and
        sorting fields of the request are ignored.

        Args:
            request: Validated search criteria

        Returns:
            Totals, averages, price range and most common subjects
        """
        predicate = build_predicate(request)
        limit = self.config.popular_subjects_limit

        with (
            LogContext(operation="get_search_statistics"),
            observe_search_operation("get_search_statistics"),
        ):
            try:
                total = await self.store.count(predicate)
                aggregates = await self.store.aggregate(predicate)
                popular = await self.store.group_count(
                    predicate, SubjectField.SUBJECT_NAME, limit
                )
                experience = await self.store.experience_values(predicate)
            except Exception as e:
                logger.error("Search statistics failed", error=str(e))
                raise

            record_search_results("get_search_statistics", total)

        average_experience = _round2(sum(experience) / len(experience)) if experience else 0.0
        average_rating = (
            _round2(aggregates.avg_rating) if aggregates.avg_rating is not None else 0.0
        )

        return SearchStatistics(
            total_results=total,
            average_experience=average_experience,
            average_rating=average_rating,
            price_range=PriceRange(
                min=_to_float(aggregates.min_rate),
                max=_to_float(aggregates.max_rate),
            ),
            popular_subjects=[
                PopularSubject(subject=subject, count=count)
                for subject, count in popular[:limit]
            ],
        )

    @traced_async("search.get_filter_options")
    async def get_filter_options(self) -> FilterOptions:
        """List the subject names and levels offered by eligible tutors."""
        predicate = TutorPredicate.eligibility_only()

        with observe_search_operation("get_filter_options"):
            try:
                subjects = await self.store.distinct(predicate, SubjectField.SUBJECT_NAME)
                levels = await self.store.distinct(predicate, SubjectField.QUALIFICATION_LEVEL)
            except Exception as e:
                logger.error("Filter options lookup failed", error=str(e))
                raise

        return FilterOptions(subjects=subjects, qualification_levels=levels)

    @traced_async("search.get_tutor_details")
    async def get_tutor_details(self, tutor_id: UUID) -> TutorSearchResult | None:
        """Load a single eligible tutor.

        Args:
            tutor_id: Tutor to load

        Returns:
            Search result without a relevance score, or None if the tutor
            does not exist or is not eligible
        """
        add_span_attributes(tutor_id=tutor_id)

        with observe_search_operation("get_tutor_details"):
            try:
                tutor = await self.store.get(tutor_id, TutorPredicate.eligibility_only())
            except Exception as e:
                logger.error("Tutor details lookup failed", tutor_id=str(tutor_id), error=str(e))
                raise

        if tutor is None:
            logger.debug("Tutor not found or not eligible", tutor_id=str(tutor_id))
            return None
        return to_search_result(tutor)
