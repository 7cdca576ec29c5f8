"""Create lifecycle_documents and lifecycle_audit_events tables

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "lifecycle_documents",
        sa.Column("document_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("classification", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("retention_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revision", sa.Integer, nullable=False, server_default="1"),
        sa.Column("payload", postgresql.JSONB, nullable=False),
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
    )
    op.create_index("idx_lifecycle_documents_status", "lifecycle_documents", ["status"])
    op.create_index(
        "idx_lifecycle_documents_classification", "lifecycle_documents", ["classification"]
    )
    op.create_index(
        "idx_lifecycle_documents_retention_end", "lifecycle_documents", ["retention_end_date"]
    )

    # Append-only audit trail
    op.create_table(
        "lifecycle_audit_events",
        sa.Column("event_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False, server_default="info"),
        sa.Column("document_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("actor", sa.String(255), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("details", postgresql.JSONB, nullable=False),
        sa.Column(
            "recorded_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("idx_lifecycle_audit_document", "lifecycle_audit_events", ["document_id"])
    op.create_index("idx_lifecycle_audit_event_type", "lifecycle_audit_events", ["event_type"])
    op.create_index("idx_lifecycle_audit_occurred", "lifecycle_audit_events", ["occurred_at"])


def downgrade() -> None:
    op.drop_table("lifecycle_audit_events")
    op.drop_table("lifecycle_documents")
