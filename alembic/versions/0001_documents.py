"""Create document storage table."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_documents"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create documents table keyed by id and grouped by collection."""

    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("collection", sa.Text(), nullable=False),
        sa.Column("body", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_documents_collection", "documents", ["collection"])


def downgrade() -> None:
    """Drop documents table."""

    op.drop_index("ix_documents_collection", table_name="documents")
    op.drop_table("documents")
