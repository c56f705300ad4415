"""projects, audio uploads and speech analyses

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("vibe", sa.String(255), nullable=True),
        sa.Column("strict", sa.Boolean(), nullable=False),
        sa.Column("timeframe", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_projects_user_id", "projects", ["user_id"])

    op.create_table(
        "audio_uploads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_data", sa.LargeBinary(), nullable=False),
        sa.Column("file_hash", sa.String(64), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "file_hash", name="uq_upload_user_hash"),
    )
    op.create_index("ix_audio_uploads_user_id", "audio_uploads", ["user_id"])
    op.create_index("ix_audio_uploads_project_id", "audio_uploads", ["project_id"])

    op.create_table(
        "speech_analyses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("upload_id", sa.String(36), sa.ForeignKey("audio_uploads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("transcript", sa.Text(), nullable=False),
        sa.Column("timestamped_transcript", sa.JSON(), nullable=True),
        sa.Column("duration_seconds", sa.Float(), nullable=False),
        sa.Column("word_count", sa.Integer(), nullable=False),
        sa.Column("wpm", sa.Float(), nullable=False),
        sa.Column("filler_words", sa.JSON(), nullable=False),
        sa.Column("total_filler_words", sa.Integer(), nullable=False),
        sa.Column("gaps", sa.JSON(), nullable=False),
        sa.Column("average_gap_duration", sa.Float(), nullable=False),
        sa.Column("speech_segments", sa.JSON(), nullable=False),
        sa.Column("coherence_issues", sa.JSON(), nullable=False),
        sa.Column("overall_coherence_score", sa.Float(), nullable=False),
        sa.Column("suggestions", sa.JSON(), nullable=False),
        sa.Column("performance", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_speech_analyses_upload_id", "speech_analyses", ["upload_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_speech_analyses_upload_id", table_name="speech_analyses")
    op.drop_table("speech_analyses")
    op.drop_index("ix_audio_uploads_project_id", table_name="audio_uploads")
    op.drop_index("ix_audio_uploads_user_id", table_name="audio_uploads")
    op.drop_table("audio_uploads")
    op.drop_index("ix_projects_user_id", table_name="projects")
    op.drop_table("projects")
