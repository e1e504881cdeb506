"""SQLAlchemy model for the schemas table.

Schemas store the registered record shapes and the state of the
collection that holds their records.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from schemabase.infrastructure.persistence.database import Base


class SchemaModel(Base):
    """SQLAlchemy model for the schemas table.

    Attributes:
        id: Primary key (UUID string).
        name: Schema name, also the name of its record collection.
        definition: JSON-encoded schema definition.
        table_ref: Collection name once the collection is bootstrapped.
        is_table_initialized: Whether the collection bootstrap record exists.
        created_at: Timestamp when the schema was created.
        last_updated_at: Timestamp when the schema was last updated.
    """

    __tablename__ = "schemas"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Schema ID (UUID)",
    )
    # Not unique: name uniqueness is a known gap, not a constraint
    name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
        comment="Schema name (used as the record collection name)",
    )
    definition: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="JSON schema definition: properties, required, additionalProperties",
    )
    table_ref: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
        comment="Resolved collection name once storage is bootstrapped",
    )
    is_table_initialized: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Schema(id={self.id}, name={self.name})>"
