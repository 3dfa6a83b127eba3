"""Database models for TutEasy."""

from .base import Base, PortableJSON, PortableUUID, TimestampMixin, UUIDPrimaryKeyMixin
from .tutor import (
    ProficiencyLevel,
    QualificationLevel,
    Tutor,
    TutorAvailability,
    TutorQualification,
    TutorSubject,
    VerificationStatus,
)
from .user import User, UserRole

__all__ = [
    "Base",
    "PortableJSON",
    "PortableUUID",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "User",
    "UserRole",
    "Tutor",
    "TutorSubject",
    "TutorQualification",
    "TutorAvailability",
    "VerificationStatus",
    "QualificationLevel",
    "ProficiencyLevel",
]
