"""Compile tutor search predicates and sort specs into SQLAlchemy clauses."""

from sqlalchemy import ColumnElement, Select, and_, func, or_, select, true
from sqlalchemy.sql.elements import UnaryExpression

from tuteasy.db.models.tutor import (
    Tutor,
    TutorAvailability,
    TutorQualification,
    TutorSubject,
    VerificationStatus,
)
from tuteasy.db.models.user import User
from tuteasy.search.models import SortOrder
from tuteasy.search.predicate import KeywordMatch, SubjectMatch, TutorPredicate
from tuteasy.search.sorting import SortField, SortSpec


def eligibility_clause() -> ColumnElement[bool]:
    """Gate every searchable tutor must pass.

    The tutor must be active and verified, and its owning user must have a
    verified email address.
    """
    return and_(
        Tutor.is_active.is_(True),
        Tutor.verification_status == VerificationStatus.VERIFIED.value,
        Tutor.user.has(User.is_email_verified.is_(True)),
    )


def _subject_clause(match: SubjectMatch) -> ColumnElement[bool]:
    """Single EXISTS over subjects so names and levels bind to the same row."""
    conditions = []
    if match.names:
        conditions.append(TutorSubject.subject_name.in_(match.names))
    if match.levels:
        conditions.append(
            TutorSubject.qualification_level.in_([level.value for level in match.levels])
        )
    return Tutor.subjects.any(and_(true(), *conditions))


def _keyword_clause(match: KeywordMatch) -> ColumnElement[bool]:
    """Any of bio, qualification name or institution contains the phrase,
    or any subject name contains one of the terms."""
    phrase = match.phrase
    alternatives = [
        Tutor.bio.icontains(phrase, autoescape=True),
        Tutor.qualifications.any(
            TutorQualification.qualification_name.icontains(phrase, autoescape=True)
        ),
        Tutor.qualifications.any(
            TutorQualification.institution.icontains(phrase, autoescape=True)
        ),
    ]
    alternatives.extend(
        Tutor.subjects.any(TutorSubject.subject_name.icontains(term, autoescape=True))
        for term in match.terms
    )
    return or_(*alternatives)


def compile_predicate(predicate: TutorPredicate) -> ColumnElement[bool]:
    """Translate a predicate into one boolean clause over ``tutors``.

    The eligibility gate is always included.

    Args:
        predicate: Search predicate

    Returns:
        Clause suitable for ``Select.where``
    """
    clauses: list[ColumnElement[bool]] = [eligibility_clause()]

    if predicate.subject_match is not None:
        clauses.append(_subject_clause(predicate.subject_match))

    if predicate.availability:
        clauses.append(
            Tutor.availability.any(TutorAvailability.slot.in_(sorted(predicate.availability)))
        )

    if predicate.min_rate is not None:
        clauses.append(Tutor.hourly_rate_min >= predicate.min_rate)
    if predicate.max_rate is not None:
        clauses.append(Tutor.hourly_rate_max <= predicate.max_rate)

    if predicate.keyword_match is not None:
        clauses.append(_keyword_clause(predicate.keyword_match))

    return and_(*clauses)


def max_experience_column():
    """Correlated scalar subquery for a tutor's longest subject experience."""
    return (
        select(func.max(TutorSubject.years_experience))
        .where(TutorSubject.tutor_id == Tutor.id)
        .correlate(Tutor)
        .scalar_subquery()
    )


def _sort_column(field: SortField):
    if field == SortField.EXPERIENCE:
        return max_experience_column()
    return getattr(Tutor, field.value)


def compile_sort(sort: SortSpec) -> list[UnaryExpression]:
    """Translate sort keys into ORDER BY terms.

    NULL values sort last in either direction, and ``tutors.id`` is appended
    so pages are stable when every key ties.
    """
    order_by: list[UnaryExpression] = []
    for key in sort:
        column = _sort_column(key.field)
        ordered = column.asc() if key.direction == SortOrder.ASC else column.desc()
        order_by.append(ordered.nulls_last())
    order_by.append(Tutor.id.asc())
    return order_by


def filter_tutors(query: Select, predicate: TutorPredicate) -> Select:
    """Restrict a tutor query to tutors matching a predicate."""
    return query.where(compile_predicate(predicate))


def matching_tutor_ids(predicate: TutorPredicate) -> Select:
    """Select the ids of tutors matching a predicate, for use in IN clauses."""
    return filter_tutors(select(Tutor.id), predicate)
