"""create_schemas_and_documents

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 09:12:44.381205

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c9a2b7d10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create schemas and documents tables."""
    op.create_table(
        "schemas",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Schema ID (UUID)"),
        sa.Column(
            "name",
            sa.String(length=128),
            nullable=False,
            comment="Schema name (used as the record collection name)",
        ),
        sa.Column(
            "definition",
            sa.Text(),
            nullable=False,
            comment="JSON schema definition: properties, required, additionalProperties",
        ),
        sa.Column(
            "table_ref",
            sa.String(length=128),
            nullable=True,
            comment="Resolved collection name once storage is bootstrapped",
        ),
        sa.Column("is_table_initialized", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.Column(
            "last_updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_schemas_name"), "schemas", ["name"], unique=False)

    op.create_table(
        "documents",
        sa.Column("pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "collection",
            sa.String(length=128),
            nullable=False,
            comment="Collection (schema name) the record belongs to",
        ),
        sa.Column(
            "record_id",
            sa.String(length=64),
            nullable=False,
            comment="Record id within its collection",
        ),
        sa.Column(
            "data",
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("pk"),
        sa.UniqueConstraint("collection", "record_id", name="uq_documents_collection_record"),
    )
    op.create_index(op.f("ix_documents_collection"), "documents", ["collection"], unique=False)


def downgrade() -> None:
    """Drop documents and schemas tables."""
    op.drop_index(op.f("ix_documents_collection"), table_name="documents")
    op.drop_table("documents")
    op.drop_index(op.f("ix_schemas_name"), table_name="schemas")
    op.drop_table("schemas")
