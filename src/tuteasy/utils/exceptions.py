"""Custom exceptions for TutEasy."""

from uuid import UUID


class TutEasyError(Exception):
    """Base exception for all TutEasy errors."""

    pass


class SearchError(TutEasyError):
    """Error during search operations."""

    pass


class TutorNotFoundError(SearchError):
    """Raised when a tutor does not exist or is not publicly searchable.

    Attributes:
        tutor_id: The tutor that was requested
    """

    def __init__(self, tutor_id: UUID, message: str | None = None):
        super().__init__(message or f"Tutor not found or not available: {tutor_id}")
        self.tutor_id = tutor_id


class ConfigurationError(TutEasyError):
    """Error in configuration or settings."""

    pass
