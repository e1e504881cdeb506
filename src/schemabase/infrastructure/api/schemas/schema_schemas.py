"""Pydantic schemas for schema registry endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from schemabase.domain.entities import Schema


class CreateSchemaRequest(BaseModel):
    """Request body for registering a new schema."""

    name: str = Field(
        ...,
        description="Schema name, also the name of its record collection",
    )
    definition: dict[str, Any] = Field(
        ...,
        description="Definition with a 'properties' mapping and optional "
        "'required' list and 'additionalProperties' flag",
    )


class UpdateSchemaRequest(BaseModel):
    """Request body for updating a schema.

    A request carrying ``definition`` replaces the definition and nothing
    else. Otherwise ``name`` is applied.
    """

    name: str | None = Field(default=None, description="New schema name")
    definition: dict[str, Any] | None = Field(
        default=None,
        description="Replacement definition",
    )

    def to_patch(self) -> dict[str, Any]:
        """Return only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class TableRefRequest(BaseModel):
    """Request body for setting a schema's table reference."""

    table_ref: str = Field(..., min_length=1, description="Collection name")


class SchemaResponse(BaseModel):
    """Response for a schema."""

    id: str = Field(..., description="Schema ID (UUID)")
    name: str = Field(..., description="Schema name")
    definition: dict[str, Any] = Field(..., description="Schema definition as stored")
    table_ref: str | None = Field(None, description="Collection name once bootstrapped")
    is_table_initialized: bool = Field(..., description="Whether the collection exists")
    created_at: datetime = Field(..., description="When the schema was created")
    last_updated_at: datetime = Field(..., description="When the schema was last updated")

    @classmethod
    def from_entity(cls, schema: Schema) -> "SchemaResponse":
        """Create a SchemaResponse from a Schema entity."""
        return cls(
            id=schema.id,
            name=schema.name,
            definition=schema.definition.to_dict(),
            table_ref=schema.table_ref,
            is_table_initialized=schema.is_table_initialized,
            created_at=schema.created_at,
            last_updated_at=schema.last_updated_at,
        )


class SchemaListResponse(BaseModel):
    """Response for listing schemas."""

    items: list[SchemaResponse] = Field(..., description="Registered schemas")
    total: int = Field(..., description="Number of schemas")


class RelationshipResponse(BaseModel):
    """A relationship field of a schema."""

    field: str = Field(..., description="Relationship field name")
    schema_id: str = Field(..., description="Id of the referenced schema")
    is_array: bool = Field(..., description="Whether the field holds a list of references")
