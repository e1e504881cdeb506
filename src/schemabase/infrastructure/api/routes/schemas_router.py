"""Schema registry API routes.

Provides endpoints for registering and managing schemas.
"""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from schemabase.core.logging import get_logger
from schemabase.domain.exceptions import SchemaNotFoundError
from schemabase.infrastructure.api.dependencies import Registry
from schemabase.infrastructure.api.schemas import (
    CreateSchemaRequest,
    ErrorResponse,
    RelationshipResponse,
    SchemaListResponse,
    SchemaResponse,
    TableRefRequest,
    UpdateSchemaRequest,
)

logger = get_logger(__name__)

router = APIRouter()


def _schema_not_found(schema_id: str) -> JSONResponse:
    error = SchemaNotFoundError(schema_id)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": error.code, "message": error.message, **error.context},
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SchemaResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid schema definition"},
    },
)
async def create_schema(request: CreateSchemaRequest, registry: Registry) -> SchemaResponse:
    """Register a new schema.

    The name and definition are validated before anything is stored.
    """
    schema = await registry.create_schema(request.name, request.definition)
    return SchemaResponse.from_entity(schema)


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=SchemaListResponse,
)
async def list_schemas(registry: Registry) -> SchemaListResponse:
    """List all registered schemas."""
    schemas = await registry.get_all_schemas()
    items = [SchemaResponse.from_entity(schema) for schema in schemas]

    logger.debug("Schemas listed", total=len(items))

    return SchemaListResponse(items=items, total=len(items))


@router.get(
    "/{schema_id}",
    status_code=status.HTTP_200_OK,
    response_model=SchemaResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def get_schema(schema_id: str, registry: Registry) -> SchemaResponse | JSONResponse:
    """Get a schema by ID."""
    schema = await registry.get_schema(schema_id)

    if schema is None:
        logger.info("Schema not found", schema_id=schema_id)
        return _schema_not_found(schema_id)

    return SchemaResponse.from_entity(schema)


@router.get(
    "/{schema_id}/relationships",
    status_code=status.HTTP_200_OK,
    response_model=list[RelationshipResponse],
    responses={
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def get_relationships(schema_id: str, registry: Registry) -> list[RelationshipResponse]:
    """List the relationship fields of a schema."""
    relationships = await registry.get_relationships(schema_id)
    return [
        RelationshipResponse(
            field=field,
            schema_id=relationship.schema_id,
            is_array=relationship.is_array,
        )
        for field, relationship in relationships.items()
    ]


@router.patch(
    "/{schema_id}",
    status_code=status.HTTP_200_OK,
    response_model=SchemaResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid schema definition"},
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def update_schema(
    schema_id: str,
    request: UpdateSchemaRequest,
    registry: Registry,
) -> SchemaResponse:
    """Update a schema's definition or name.

    Sending ``definition`` replaces the definition and ignores ``name``.
    """
    schema = await registry.update_schema(schema_id, request.to_patch())
    return SchemaResponse.from_entity(schema)


@router.delete(
    "/{schema_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Schema deleted (or never existed)"},
    },
)
async def delete_schema(schema_id: str, registry: Registry) -> Response:
    """Delete a schema.

    The schema's records are left in place.
    """
    await registry.delete_schema(schema_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{schema_id}/table-ref",
    status_code=status.HTTP_200_OK,
    response_model=SchemaResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def update_table_ref(
    schema_id: str,
    request: TableRefRequest,
    registry: Registry,
) -> SchemaResponse:
    """Set a schema's table reference and mark its table initialized."""
    schema = await registry.update_schema_table_ref(schema_id, request.table_ref)
    return SchemaResponse.from_entity(schema)
