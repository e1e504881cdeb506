"""Persistence repositories for database operations."""

from schemabase.infrastructure.persistence.repositories.schema_repository import (
    SchemaRepository,
)

__all__ = [
    "SchemaRepository",
]
