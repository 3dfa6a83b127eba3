"""Tutor profile models: tutors and their subjects, qualifications and availability."""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, PortableJSON, PortableUUID, TimestampMixin, UUIDPrimaryKeyMixin


class VerificationStatus(str, Enum):
    """Review state of a tutor profile or a qualification."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class QualificationLevel(str, Enum):
    """Academic stage a subject is taught at (UK, IB and BTEC systems)."""

    EARLY_YEARS = "EARLY_YEARS"
    PRIMARY = "PRIMARY"
    KS1 = "KS1"
    KS2 = "KS2"
    KS3 = "KS3"
    GCSE = "GCSE"
    IGCSE = "IGCSE"
    A_LEVEL = "A_LEVEL"
    AS_LEVEL = "AS_LEVEL"
    BTEC_LEVEL_1 = "BTEC_LEVEL_1"
    BTEC_LEVEL_2 = "BTEC_LEVEL_2"
    BTEC_LEVEL_3 = "BTEC_LEVEL_3"
    IB_PYP = "IB_PYP"
    IB_MYP = "IB_MYP"
    IB_DP_SL = "IB_DP_SL"
    IB_DP_HL = "IB_DP_HL"
    IB_CP = "IB_CP"
    UNDERGRADUATE = "UNDERGRADUATE"
    POSTGRADUATE = "POSTGRADUATE"
    ADULT_EDUCATION = "ADULT_EDUCATION"
    OTHER = "OTHER"


class ProficiencyLevel(str, Enum):
    """Tutor's self-assessed command of a subject, lowest first."""

    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"

    @property
    def rank(self) -> int:
        """Ordinal position, 0 for BEGINNER."""
        return list(ProficiencyLevel).index(self)


class Tutor(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Public tutor profile.

    A tutor is searchable only while active, verified, and owned by a user
    whose email address has been verified.
    """

    __tablename__ = "tutors"

    user_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    hourly_rate_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    hourly_rate_max: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VerificationStatus.PENDING.value
    )

    # No review subsystem feeds these yet, so they stay at their defaults
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False, default=Decimal("0"))
    total_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    language_proficiencies: Mapped[list] = mapped_column(
        PortableJSON(), nullable=False, default=list
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="tutor")
    subjects: Mapped[list["TutorSubject"]] = relationship(
        "TutorSubject",
        back_populates="tutor",
        cascade="all, delete-orphan",
        order_by="TutorSubject.years_experience.desc()",
    )
    qualifications: Mapped[list["TutorQualification"]] = relationship(
        "TutorQualification", back_populates="tutor", cascade="all, delete-orphan"
    )
    availability: Mapped[list["TutorAvailability"]] = relationship(
        "TutorAvailability", back_populates="tutor", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_tutor_searchable", "is_active", "verification_status"),
        Index("idx_tutor_rate_min", "hourly_rate_min"),
        Index("idx_tutor_rate_max", "hourly_rate_max"),
        Index("idx_tutor_rating", "rating", "total_students"),
        Index("idx_tutor_created", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Tutor(id={self.id}, user_id={self.user_id}, "
            f"status={self.verification_status}, active={self.is_active})>"
        )


class TutorSubject(Base, UUIDPrimaryKeyMixin):
    """A subject a tutor teaches at one qualification level."""

    __tablename__ = "tutor_subjects"

    tutor_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False
    )
    subject_name: Mapped[str] = mapped_column(String(100), nullable=False)
    qualification_level: Mapped[str] = mapped_column(String(30), nullable=False)
    proficiency_level: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProficiencyLevel.INTERMEDIATE.value
    )
    years_experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    exam_boards: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    ib_subject_group: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ib_language: Mapped[str | None] = mapped_column(String(50), nullable=True)

    tutor: Mapped["Tutor"] = relationship("Tutor", back_populates="subjects")

    __table_args__ = (
        Index("idx_subject_tutor", "tutor_id"),
        Index("idx_subject_name_level", "subject_name", "qualification_level"),
    )

    def __repr__(self) -> str:
        return (
            f"<TutorSubject(tutor_id={self.tutor_id}, subject={self.subject_name}, "
            f"level={self.qualification_level})>"
        )


class TutorQualification(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A degree, certificate or teaching qualification held by a tutor."""

    __tablename__ = "tutor_qualifications"

    tutor_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False
    )
    qualification_type: Mapped[str] = mapped_column(String(50), nullable=False)
    qualification_name: Mapped[str] = mapped_column(String(255), nullable=False)
    institution: Mapped[str | None] = mapped_column(String(255), nullable=True)
    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VerificationStatus.PENDING.value
    )

    tutor: Mapped["Tutor"] = relationship("Tutor", back_populates="qualifications")

    __table_args__ = (Index("idx_qualification_tutor", "tutor_id", "verification_status"),)

    def __repr__(self) -> str:
        return (
            f"<TutorQualification(tutor_id={self.tutor_id}, name={self.qualification_name}, "
            f"status={self.verification_status})>"
        )


class TutorAvailability(Base, UUIDPrimaryKeyMixin):
    """One availability slot label (e.g. ``weekday_evenings``) offered by a tutor."""

    __tablename__ = "tutor_availability"

    tutor_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False
    )
    slot: Mapped[str] = mapped_column(String(50), nullable=False)

    tutor: Mapped["Tutor"] = relationship("Tutor", back_populates="availability")

    __table_args__ = (
        Index("idx_availability_tutor_slot", "tutor_id", "slot", unique=True),
        Index("idx_availability_slot", "slot"),
    )

    def __repr__(self) -> str:
        return f"<TutorAvailability(tutor_id={self.tutor_id}, slot={self.slot})>"
