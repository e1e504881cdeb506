"""Document store adapters."""

from schemabase.infrastructure.persistence.stores.base import DocumentStore
from schemabase.infrastructure.persistence.stores.sql_store import SqlDocumentStore

__all__ = [
    "DocumentStore",
    "SqlDocumentStore",
]
