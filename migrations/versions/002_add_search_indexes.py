"""Add indexes for tutor search predicates and sorts

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

This migration adds indexes for the search paths:
- Partial index over searchable tutors (active and verified)
- B-tree indexes for the rate, rating and recency sorts
- Subject name/level lookups for the subject filter and statistics
- Trigram GIN indexes for case-insensitive keyword matching
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

_TRIGRAM_INDEXES = (
    ("idx_tutor_bio_trgm", "tutors", "bio"),
    ("idx_subject_name_trgm", "tutor_subjects", "subject_name"),
    ("idx_qualification_name_trgm", "tutor_qualifications", "qualification_name"),
    ("idx_qualification_institution_trgm", "tutor_qualifications", "institution"),
)


def upgrade() -> None:
    # =========================================================================
    # Tutors Table Indexes
    # =========================================================================

    op.create_index(
        "idx_tutor_searchable",
        "tutors",
        ["is_active", "verification_status"],
        postgresql_where=sa.text("is_active = true AND verification_status = 'VERIFIED'"),
    )
    op.create_index("idx_tutor_rate_min", "tutors", ["hourly_rate_min"])
    op.create_index("idx_tutor_rate_max", "tutors", ["hourly_rate_max"])
    op.create_index("idx_tutor_rating", "tutors", ["rating", "total_students"])
    op.create_index("idx_tutor_created", "tutors", [sa.text("created_at DESC")])

    # =========================================================================
    # Subject and Availability Indexes
    # =========================================================================

    op.create_index(
        "idx_subject_name_level", "tutor_subjects", ["subject_name", "qualification_level"]
    )
    op.create_index(
        "idx_subject_tutor_experience",
        "tutor_subjects",
        ["tutor_id", sa.text("years_experience DESC")],
    )
    op.create_index("idx_availability_slot", "tutor_availability", ["slot"])

    # =========================================================================
    # Keyword Search (ILIKE '%term%')
    # =========================================================================

    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
    for name, table, column in _TRIGRAM_INDEXES:
        op.execute(f"CREATE INDEX {name} ON {table} USING gin ({column} gin_trgm_ops)")


def downgrade() -> None:
    for name, table, _column in reversed(_TRIGRAM_INDEXES):
        op.drop_index(name, table_name=table)

    op.drop_index("idx_availability_slot", table_name="tutor_availability")
    op.drop_index("idx_subject_tutor_experience", table_name="tutor_subjects")
    op.drop_index("idx_subject_name_level", table_name="tutor_subjects")

    op.drop_index("idx_tutor_created", table_name="tutors")
    op.drop_index("idx_tutor_rating", table_name="tutors")
    op.drop_index("idx_tutor_rate_max", table_name="tutors")
    op.drop_index("idx_tutor_rate_min", table_name="tutors")
    op.drop_index("idx_tutor_searchable", table_name="tutors")
