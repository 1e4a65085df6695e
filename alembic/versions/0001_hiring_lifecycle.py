"""Create hiring lifecycle tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "job_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("match_score", sa.Numeric(5, 2), nullable=False),
        sa.Column("resume_url", sa.Text(), nullable=True),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("viewed_by_employer", sa.Boolean(), nullable=False),
        sa.Column("is_bookmarked", sa.Boolean(), nullable=False),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_id", "user_id", name="uq_job_applications_job_user"),
    )
    for column in ("job_id", "user_id", "company_id", "status", "applied_at"):
        op.create_index(
            f"ix_job_applications_{column}", "job_applications", [column], unique=False
        )

    op.create_table(
        "job_application_stages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("stage_name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("handled_by", sa.Integer(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["application_id"], ["job_applications.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_job_application_stages_application_id",
        "job_application_stages",
        ["application_id"],
        unique=False,
    )
    op.create_index(
        "ix_job_application_stages_handled_by",
        "job_application_stages",
        ["handled_by"],
        unique=False,
    )
    # At most one open stage per application
    op.create_index(
        "uq_job_application_stages_open",
        "job_application_stages",
        ["application_id"],
        unique=True,
        postgresql_where=sa.text("completed_at IS NULL"),
        sqlite_where=sa.text("completed_at IS NULL"),
    )

    op.create_table(
        "application_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(50), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verified_by", sa.Integer(), nullable=True),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["application_id"], ["job_applications.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("application_id", "user_id", "is_verified"):
        op.create_index(
            f"ix_application_documents_{column}",
            "application_documents",
            [column],
            unique=False,
        )

    op.create_table(
        "interviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=True),
        sa.Column("interviewer_id", sa.Integer(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.Column("interview_type", sa.String(20), nullable=False),
        sa.Column("meeting_link", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("overall_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("technical_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("communication_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("personality_score", sa.Numeric(5, 2), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("feedback_summary", sa.Text(), nullable=True),
        sa.Column("reschedule_reasons", sa.Text(), nullable=True),
        sa.Column("reminder_sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["application_id"], ["job_applications.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["stage_id"], ["job_application_stages.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("application_id", "stage_id", "interviewer_id", "scheduled_at", "status"):
        op.create_index(f"ix_interviews_{column}", "interviews", [column], unique=False)

    op.create_table(
        "application_notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("note_type", sa.String(30), nullable=False),
        sa.Column("note_text", sa.Text(), nullable=False),
        sa.Column("visibility", sa.String(20), nullable=False),
        sa.Column("sentiment", sa.String(20), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["application_id"], ["job_applications.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["stage_id"], ["job_application_stages.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("application_id", "stage_id", "author_id"):
        op.create_index(
            f"ix_application_notes_{column}", "application_notes", [column], unique=False
        )


def downgrade() -> None:
    for column in ("author_id", "stage_id", "application_id"):
        op.drop_index(f"ix_application_notes_{column}", table_name="application_notes")
    op.drop_table("application_notes")

    for column in ("status", "scheduled_at", "interviewer_id", "stage_id", "application_id"):
        op.drop_index(f"ix_interviews_{column}", table_name="interviews")
    op.drop_table("interviews")

    for column in ("is_verified", "user_id", "application_id"):
        op.drop_index(
            f"ix_application_documents_{column}", table_name="application_documents"
        )
    op.drop_table("application_documents")

    op.drop_index("uq_job_application_stages_open", table_name="job_application_stages")
    op.drop_index(
        "ix_job_application_stages_handled_by", table_name="job_application_stages"
    )
    op.drop_index(
        "ix_job_application_stages_application_id", table_name="job_application_stages"
    )
    op.drop_table("job_application_stages")

    for column in ("applied_at", "status", "company_id", "user_id", "job_id"):
        op.drop_index(f"ix_job_applications_{column}", table_name="job_applications")
    op.drop_table("job_applications")
