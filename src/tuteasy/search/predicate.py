"""Tutor search predicates.

A predicate describes which tutors a search matches, independently of how
the store evaluates it. Every predicate implicitly includes the eligibility
gate (active, verified, owner email verified); the store adds it when the
predicate is compiled.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from tuteasy.db.models.tutor import QualificationLevel
from tuteasy.search.models import SearchRequest


@dataclass(frozen=True)
class SubjectMatch:
    """Constraint on a single subject row.

    When both names and levels are given, the same subject must satisfy
    both: a tutor teaching Maths at GCSE and Physics at A_LEVEL does not
    match ``names=("Physics",), levels=(GCSE,)``.
    """

    names: tuple[str, ...] = ()
    levels: tuple[QualificationLevel, ...] = ()


@dataclass(frozen=True)
class KeywordMatch:
    """Case-insensitive free-text match.

    The phrase is matched against the bio and the qualification names and
    institutions; each term is matched against subject names.
    """

    phrase: str
    terms: tuple[str, ...]

    @classmethod
    def from_keywords(cls, keywords: str | None) -> "KeywordMatch | None":
        """Build a match from raw keywords, or None when they are blank."""
        phrase = (keywords or "").strip()
        if not phrase:
            return None
        return cls(phrase=phrase, terms=tuple(phrase.split()))


@dataclass(frozen=True)
class TutorPredicate:
    """Conjunction of search filters over eligible tutors."""

    subject_match: SubjectMatch | None = None
    availability: frozenset[str] = field(default_factory=frozenset)
    min_rate: Decimal | None = None
    max_rate: Decimal | None = None
    keyword_match: KeywordMatch | None = None

    @classmethod
    def eligibility_only(cls) -> "TutorPredicate":
        """Predicate matching every eligible tutor."""
        return cls()


def build_predicate(request: SearchRequest) -> TutorPredicate:
    """Translate a validated search request into a predicate.

    Args:
        request: Validated search criteria

    Returns:
        Predicate combining every filter present on the request
    """
    subject_match = None
    if request.subjects or request.levels:
        subject_match = SubjectMatch(
            names=tuple(request.subjects or ()),
            levels=tuple(request.levels or ()),
        )

    return TutorPredicate(
        subject_match=subject_match,
        availability=frozenset(request.availability or ()),
        min_rate=request.min_rate,
        max_rate=request.max_rate,
        keyword_match=KeywordMatch.from_keywords(request.keywords),
    )
