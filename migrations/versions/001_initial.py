"""Initial migration - create uploaded_files, analyses, analysis_cache and rate_limit_windows.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "uploaded_files",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(500), nullable=False),
        sa.Column("filepath", sa.String(1024), nullable=False),
        sa.Column("file_hash", sa.String(64), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_uploaded_files"),
        sa.UniqueConstraint("filename", name="uq_uploaded_files_filename"),
    )
    op.create_index("ix_uploaded_files_file_hash", "uploaded_files", ["file_hash"], unique=True)

    op.create_table(
        "analyses",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("analysis_data", sa.Text(), nullable=False),
        sa.Column("method", sa.String(20), nullable=False),
        sa.Column("font_sizes_detected", sa.Integer(), nullable=False),
        sa.Column("exceeds_size_limit", sa.Boolean(), nullable=False),
        sa.Column("overall_score", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_analyses"),
        sa.ForeignKeyConstraint(
            ["file_id"],
            ["uploaded_files.id"],
            name="fk_analyses_file_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_analyses_file_id", "analyses", ["file_id"])

    op.create_table(
        "analysis_cache",
        sa.Column("content_hash", sa.String(64), nullable=False),
        sa.Column("analysis_result", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("content_hash", name="pk_analysis_cache"),
    )
    op.create_index("ix_analysis_cache_expires_at", "analysis_cache", ["expires_at"])

    op.create_table(
        "rate_limit_windows",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("identity", sa.String(255), nullable=False),
        sa.Column("request_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("window_end", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_rate_limit_windows"),
    )
    op.create_index("ix_rate_limit_windows_window_start", "rate_limit_windows", ["window_start"])
    op.create_index("ix_rate_limit_windows_window_end", "rate_limit_windows", ["window_end"])
    op.create_index(
        "ix_rate_limit_windows_identity_start",
        "rate_limit_windows",
        ["identity", "window_start"],
    )


def downgrade() -> None:
    op.drop_index("ix_rate_limit_windows_identity_start", table_name="rate_limit_windows")
    op.drop_index("ix_rate_limit_windows_window_end", table_name="rate_limit_windows")
    op.drop_index("ix_rate_limit_windows_window_start", table_name="rate_limit_windows")
    op.drop_table("rate_limit_windows")

    op.drop_index("ix_analysis_cache_expires_at", table_name="analysis_cache")
    op.drop_table("analysis_cache")

    op.drop_index("ix_analyses_file_id", table_name="analyses")
    op.drop_table("analyses")

    op.drop_index("ix_uploaded_files_file_hash", table_name="uploaded_files")
    op.drop_table("uploaded_files")
