"""User account model."""

from enum import Enum

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class UserRole(str, Enum):
    """Role an account plays on the marketplace."""

    TUTOR = "TUTOR"
    STUDENT = "STUDENT"
    PARENT = "PARENT"
    ADMIN = "ADMIN"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Account that owns a tutor, student or parent profile.

    Only the fields the search engine reads are mapped here; credentials and
    session data live with the authentication service.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.TUTOR.value)
    is_email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    tutor: Mapped["Tutor | None"] = relationship("Tutor", back_populates="user", uselist=False)

    __table_args__ = (Index("idx_user_email_verified", "is_email_verified"),)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
