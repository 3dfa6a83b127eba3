"""Tutor search: predicates, sorting, relevance scoring and statistics."""

from tuteasy.search.engine import TutorSearchEngine, to_search_result
from tuteasy.search.models import (
    AppliedFilters,
    FilterOptions,
    PopularSubject,
    PriceRange,
    SearchRequest,
    SearchResultPage,
    SearchStatistics,
    SortBy,
    SortOrder,
    TutorSearchResult,
)
from tuteasy.search.pagination import Pagination, offset_for
from tuteasy.search.predicate import KeywordMatch, SubjectMatch, TutorPredicate, build_predicate
from tuteasy.search.scoring import RelevanceScorer
from tuteasy.search.sorting import SortField, SortKey, SortSpec, sort_spec_for
from tuteasy.search.store import SubjectField, TutorAggregates, TutorStore

__all__ = [
    "AppliedFilters",
    "FilterOptions",
    "KeywordMatch",
    "Pagination",
    "PopularSubject",
    "PriceRange",
    "RelevanceScorer",
    "SearchRequest",
    "SearchResultPage",
    "SearchStatistics",
    "SortBy",
    "SortField",
    "SortKey",
    "SortOrder",
    "SortSpec",
    "SubjectField",
    "SubjectMatch",
    "TutorAggregates",
    "TutorPredicate",
    "TutorSearchEngine",
    "TutorSearchResult",
    "TutorStore",
    "build_predicate",
    "offset_for",
    "sort_spec_for",
    "to_search_result",
]
