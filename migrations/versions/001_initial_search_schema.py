"""Initial tutor search schema

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_email_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("idx_user_email_verified", "users", ["is_email_verified"])

    # Create tutors table
    op.create_table(
        "tutors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("hourly_rate_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("hourly_rate_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "verification_status", sa.String(20), nullable=False, server_default="PENDING"
        ),
        sa.Column("rating", sa.Numeric(3, 2), nullable=False, server_default="0"),
        sa.Column("total_students", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "language_proficiencies",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )

    # Create tutor_subjects table
    op.create_table(
        "tutor_subjects",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tutor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("subject_name", sa.String(100), nullable=False),
        sa.Column("qualification_level", sa.String(30), nullable=False),
        sa.Column(
            "proficiency_level", sa.String(20), nullable=False, server_default="INTERMEDIATE"
        ),
        sa.Column("years_experience", sa.Integer, nullable=False, server_default="0"),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column(
            "exam_boards",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("ib_subject_group", sa.String(50), nullable=True),
        sa.Column("ib_language", sa.String(50), nullable=True),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutors.id"], ondelete="CASCADE"),
        sa.CheckConstraint("years_experience >= 0", name="ck_subject_years_non_negative"),
    )
    op.create_index("idx_subject_tutor", "tutor_subjects", ["tutor_id"])

    # Create tutor_qualifications table
    op.create_table(
        "tutor_qualifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tutor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("qualification_type", sa.String(50), nullable=False),
        sa.Column("qualification_name", sa.String(255), nullable=False),
        sa.Column("institution", sa.String(255), nullable=True),
        sa.Column(
            "verification_status", sa.String(20), nullable=False, server_default="PENDING"
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutors.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "idx_qualification_tutor", "tutor_qualifications", ["tutor_id", "verification_status"]
    )

    # Create tutor_availability table
    op.create_table(
        "tutor_availability",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tutor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("slot", sa.String(50), nullable=False),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutors.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "idx_availability_tutor_slot", "tutor_availability", ["tutor_id", "slot"], unique=True
    )


def downgrade() -> None:
    op.drop_table("tutor_availability")
    op.drop_table("tutor_qualifications")
    op.drop_table("tutor_subjects")
    op.drop_table("tutors")
    op.drop_table("users")
