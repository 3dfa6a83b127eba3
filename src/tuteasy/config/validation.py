"""Startup checks that settings are complete and consistent.

Errors abort startup through ``validate_or_raise``; warnings are logged
and reported by ``/health/ready``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from tuteasy.config.settings import Settings, get_settings
from tuteasy.utils.exceptions import ConfigurationError

logger = structlog.get_logger("tuteasy.config")


class ValidationSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationResult:
    """One failed check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        text = f"[{self.severity.name}] {self.field}: {self.message}"
        if self.suggestion:
            text += f"\n  Suggestion: {self.suggestion}"
        return text


class _Findings(list[ValidationResult]):
    def error(self, field: str, message: str, suggestion: str | None = None) -> None:
        self.append(ValidationResult(field, ValidationSeverity.ERROR, message, suggestion))

    def warning(self, field: str, message: str, suggestion: str | None = None) -> None:
        self.append(ValidationResult(field, ValidationSeverity.WARNING, message, suggestion))


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Run every check and return the failures (empty when all pass)."""
    settings = settings or get_settings()
    found = _Findings()

    # Database
    url = settings.DATABASE_URL
    if not url:
        found.error("DATABASE_URL", "Database URL is not configured", "Set DATABASE_URL")
    elif not url.startswith(("postgresql", "sqlite")):
        found.warning(
            "DATABASE_URL",
            f"Unexpected database type in URL: {url.split(':', 1)[0]}",
            "TutEasy is designed for PostgreSQL or SQLite",
        )
    if settings.DATABASE_POOL_SIZE < 1:
        found.error(
            "DATABASE_POOL_SIZE", f"Pool size must be positive, got {settings.DATABASE_POOL_SIZE}"
        )
    elif settings.DATABASE_POOL_SIZE > 100:
        found.warning(
            "DATABASE_POOL_SIZE",
            f"Pool size {settings.DATABASE_POOL_SIZE} may exhaust database connections",
        )

    # Search paging and scoring
    search = settings.search
    if search.max_page_size < 1:
        found.error(
            "search.max_page_size",
            f"Maximum page size must be positive, got {search.max_page_size}",
        )
    if not 1 <= search.default_page_size <= max(search.max_page_size, 1):
        found.error(
            "search.default_page_size",
            f"Default page size {search.default_page_size} must be between 1 "
            f"and max_page_size ({search.max_page_size})",
        )
    if search.popular_subjects_limit < 1:
        found.error("search.popular_subjects_limit", "Popular subjects limit must be positive")
    if search.relevance.experience_cap < 0:
        found.warning(
            "search.relevance.experience_cap",
            "Negative experience cap subtracts from every relevance score",
        )

    # Production-only rules
    if settings.ENVIRONMENT == "production":
        if "*" in settings.CORS_ORIGINS:
            found.error(
                "CORS_ORIGINS",
                "Wildcard CORS origin not allowed in production",
                "List the allowed origins",
            )
        if settings.DEBUG:
            found.error("DEBUG", "Debug mode must be disabled in production", "Set DEBUG=false")
        if settings.log_level == "DEBUG":
            found.warning(
                "log_level",
                "DEBUG log level in production may expose personal data",
                "Use INFO or WARNING",
            )

    return list(found)


def validate_or_raise(settings: Settings | None = None) -> None:
    """Raise on any error, log any warning.

    Raises:
        ConfigurationError: Listing every error found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]
    if errors:
        listing = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{listing}")

    for warning in results:
        logger.warning("configuration_warning", field=warning.field, message=warning.message)


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Settings worth logging at startup. The database URL is left out."""
    settings = settings or get_settings()
    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.log_level,
        "cors_origins_count": len(settings.CORS_ORIGINS),
        "database_pool_size": settings.DATABASE_POOL_SIZE,
        "database_max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "default_page_size": settings.search.default_page_size,
        "max_page_size": settings.search.max_page_size,
        "relevance_requires_text_match": settings.search.relevance.require_text_match,
    }
