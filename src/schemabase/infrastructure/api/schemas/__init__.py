"""API Schemas for request/response validation."""

from schemabase.infrastructure.api.schemas.data_schemas import (
    ErrorResponse,
    RecordListResponse,
    ValidationResponse,
)
from schemabase.infrastructure.api.schemas.schema_schemas import (
    CreateSchemaRequest,
    RelationshipResponse,
    SchemaListResponse,
    SchemaResponse,
    TableRefRequest,
    UpdateSchemaRequest,
)

__all__ = [
    "CreateSchemaRequest",
    "ErrorResponse",
    "RecordListResponse",
    "RelationshipResponse",
    "SchemaListResponse",
    "SchemaResponse",
    "TableRefRequest",
    "UpdateSchemaRequest",
    "ValidationResponse",
]
