"""Query helpers for database operations."""

from .tutor import (
    compile_predicate,
    compile_sort,
    eligibility_clause,
    filter_tutors,
    matching_tutor_ids,
    max_experience_column,
)

__all__ = [
    "compile_predicate",
    "compile_sort",
    "eligibility_clause",
    "filter_tutors",
    "matching_tutor_ids",
    "max_experience_column",
]
