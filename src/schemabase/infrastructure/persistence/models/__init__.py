"""SQLAlchemy models for SchemaBase."""

from schemabase.infrastructure.persistence.models.document import DocumentModel
from schemabase.infrastructure.persistence.models.schema import SchemaModel

__all__ = [
    "DocumentModel",
    "SchemaModel",
]
