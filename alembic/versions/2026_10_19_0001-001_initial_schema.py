"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

All 4 tables as defined in app/models/database_models.py:
users, documents, annotations, document_invites.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── Enum types ────────────────────────────────────────────────────────
    annotation_type = sa.Enum("HIGHLIGHT", "NOTE", name="annotationtype")

    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("settings_json", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )

    # ── documents ─────────────────────────────────────────────────────────
    op.create_table(
        "documents",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=True),
        sa.Column("file_size", sa.Integer, nullable=False),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("extracted_text", sa.Text, nullable=False),
        sa.Column("metadata_json", sa.JSON, nullable=True),
        sa.Column("keywords_json", sa.JSON, nullable=True),
        sa.Column("summary_json", sa.JSON, nullable=True),
        sa.Column("sentiment_json", sa.JSON, nullable=True),
        sa.Column("tags", sa.JSON, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("upload_date", sa.DateTime, nullable=False),
        sa.Column("last_accessed", sa.DateTime, nullable=False),
        sa.Column("last_modified", sa.DateTime, nullable=False),
    )

    # ── annotations ───────────────────────────────────────────────────────
    op.create_table(
        "annotations",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("document_id", sa.Integer, sa.ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("parent_id", sa.Integer, sa.ForeignKey("annotations.id", ondelete="CASCADE"), nullable=True, index=True),
        sa.Column("type", annotation_type, nullable=False),
        sa.Column("selected_text", sa.Text, nullable=False),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column("position_json", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )

    # ── document_invites ──────────────────────────────────────────────────
    op.create_table(
        "document_invites",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("document_id", sa.Integer, sa.ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("invited_by", sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("invitee_email", sa.String(255), nullable=False, index=True),
        sa.Column("invitee_name", sa.String(255), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("token", sa.String(128), nullable=False, unique=True, index=True),
        sa.Column("expires_at", sa.DateTime, nullable=False),
        sa.Column("is_used", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("document_invites")
    op.drop_table("annotations")
    op.drop_table("documents")
    op.drop_table("users")

    op.execute("DROP TYPE IF EXISTS annotationtype")
