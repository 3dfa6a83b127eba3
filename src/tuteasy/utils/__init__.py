"""Utility modules for TutEasy."""

from tuteasy.utils.exceptions import (
    ConfigurationError,
    SearchError,
    TutEasyError,
    TutorNotFoundError,
)

__all__ = [
    "TutEasyError",
    "SearchError",
    "TutorNotFoundError",
    "ConfigurationError",
]
