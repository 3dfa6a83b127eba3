"""Keyword relevance scoring for tutor search results."""

from decimal import ROUND_HALF_UP, Decimal

from tuteasy.config.settings import RelevanceWeights
from tuteasy.search.models import TutorSearchResult

_TWO_PLACES = Decimal("0.01")


class RelevanceScorer:
    """Scores how well a tutor matches a keyword string.

    Matching is case-insensitive substring matching per whitespace-separated
    term. Textual points accumulate per term and per matching subject or
    qualification; experience and rating bonuses are added once.

    Example:
        scorer = RelevanceScorer(settings.search.relevance)
        score = scorer.score(result, "mathematics experienced")
    """

    def __init__(self, weights: RelevanceWeights | None = None):
        """Initialize with scoring weights (defaults when omitted)."""
        self.weights = weights or RelevanceWeights()

    def score(self, tutor: TutorSearchResult, keywords: str) -> float:
        """Compute the relevance score of a tutor.

        Args:
            tutor: Transformed tutor result
            keywords: Raw keyword string from the request

        Returns:
            Score rounded half-up to 2 decimal places
        """
        w = self.weights
        terms = keywords.strip().lower().split()
        bio = (tutor.bio or "").lower()

        text_score = 0.0
        for term in terms:
            if bio and term in bio:
                text_score += w.bio_match

            for subject in tutor.subjects:
                name = subject.subject_name.lower()
                if term in name:
                    text_score += w.subject_match
                    if name == term:
                        text_score += w.subject_exact_bonus

            for qualification in tutor.qualifications:
                if term in qualification.qualification_name.lower():
                    text_score += w.qualification_name_match
                if qualification.institution and term in qualification.institution.lower():
                    text_score += w.institution_match

        total = text_score
        if text_score > 0 or not w.require_text_match:
            total += min(tutor.experience_years * w.experience_multiplier, w.experience_cap)
            total += tutor.rating * w.rating_multiplier

        return float(Decimal(str(total)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
