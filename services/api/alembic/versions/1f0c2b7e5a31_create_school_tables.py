"""create_school_tables

Revision ID: 1f0c2b7e5a31
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "1f0c2b7e5a31"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("reg_number", sa.String(length=50), nullable=False),
        sa.Column("pin", sa.String(length=20), nullable=False),
        sa.Column("class_level", sa.String(length=50), nullable=False),
        sa.Column("guardian_phone", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("date_of_birth", sa.String(length=20), nullable=True),
        sa.Column("fees_paid", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=True),
        sa.Column("application_date", sa.String(length=40), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_reg_number", "students", ["reg_number"], unique=True)
    op.create_index("ix_students_class_level", "students", ["class_level"], unique=False)

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("assigned_classes", sa.JSON(), nullable=False),
        sa.Column("subjects", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_teachers_email", "teachers", ["email"], unique=True)

    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "applications",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=100), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("date_of_birth", sa.String(length=20), nullable=True),
        sa.Column("special_needs", sa.Text(), nullable=True),
        sa.Column("class_applied", sa.String(length=50), nullable=True),
        sa.Column("last_school", sa.String(length=200), nullable=True),
        sa.Column("islamiyya_school", sa.String(length=200), nullable=True),
        sa.Column("graduation_year", sa.String(length=10), nullable=True),
        sa.Column("parent_name", sa.String(length=200), nullable=True),
        sa.Column("parent_occupation", sa.String(length=200), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("payment_reference", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("photo_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_applications_user_id", "applications", ["user_id"], unique=True)
    op.create_index("ix_applications_payment_reference", "applications", ["payment_reference"], unique=False)
    op.create_index("ix_applications_status", "applications", ["status"], unique=False)

    op.create_table(
        "results",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("student_name", sa.String(length=200), nullable=True),
        sa.Column("reg_number", sa.String(length=50), nullable=True),
        sa.Column("class_level", sa.String(length=50), nullable=False),
        sa.Column("term", sa.String(length=20), nullable=False),
        sa.Column("session", sa.String(length=20), nullable=False),
        sa.Column("scores", sa.JSON(), nullable=False),
        sa.Column("total_score", sa.Float(), nullable=False),
        sa.Column("average", sa.Float(), nullable=False),
        sa.Column("position", sa.String(length=10), nullable=True),
        sa.Column("class_population", sa.Integer(), nullable=True),
        sa.Column("teacher_comment", sa.Text(), nullable=True),
        sa.Column("principal_comment", sa.Text(), nullable=True),
        sa.Column("next_term_begins", sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_results_student_id", "results", ["student_id"], unique=False)
    op.create_index("ix_results_class_term_session", "results", ["class_level", "term", "session"], unique=False)

    op.create_table(
        "posts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("date", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("posts")
    op.drop_index("ix_results_class_term_session", table_name="results")
    op.drop_index("ix_results_student_id", table_name="results")
    op.drop_table("results")
    op.drop_index("ix_applications_status", table_name="applications")
    op.drop_index("ix_applications_payment_reference", table_name="applications")
    op.drop_index("ix_applications_user_id", table_name="applications")
    op.drop_table("applications")
    op.drop_table("classes")
    op.drop_index("ix_teachers_email", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("ix_students_class_level", table_name="students")
    op.drop_index("ix_students_reg_number", table_name="students")
    op.drop_table("students")
