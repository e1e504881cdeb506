"""SQLAlchemy model for the documents table.

Every record of every schema lives here, partitioned by collection name
and keyed by record id within its collection.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from schemabase.infrastructure.persistence.database import Base


class DocumentModel(Base):
    """SQLAlchemy model for the documents table.

    Attributes:
        pk: Surrogate key; its order is the collection's insertion order.
        collection: Collection name.
        record_id: Record id, unique within the collection.
        data: The record body.
        created_at: Timestamp when the row was first written.
        updated_at: Timestamp when the row was last written.
    """

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "record_id", name="uq_documents_collection_record"),
    )

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
        comment="Collection (schema name) the record belongs to",
    )
    record_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Record id within its collection",
    )
    data: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Document(collection={self.collection}, record_id={self.record_id})>"
