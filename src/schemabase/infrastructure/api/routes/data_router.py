"""Data API routes.

Provides CRUD, validation and lookup endpoints for records of registered
schemas. Specific sub-paths are declared before ``/{schema_id}/{record_id}``
so they are not captured as record ids.
"""

from typing import Any

from fastapi import APIRouter, Body, Query, Response, status
from fastapi.responses import JSONResponse

from schemabase.core.logging import get_logger
from schemabase.infrastructure.api.dependencies import Data
from schemabase.infrastructure.api.schemas import (
    ErrorResponse,
    RecordListResponse,
    SchemaResponse,
    ValidationResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/{schema_id}/table",
    status_code=status.HTTP_200_OK,
    response_model=SchemaResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def create_table(schema_id: str, service: Data) -> SchemaResponse:
    """Bootstrap a schema's record collection.

    Safe to call more than once.
    """
    schema = await service.create_table_for_schema(schema_id)
    return SchemaResponse.from_entity(schema)


@router.post(
    "/{schema_id}/validate",
    status_code=status.HTTP_200_OK,
    response_model=ValidationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Structural or referential error"},
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def validate_record(
    schema_id: str,
    service: Data,
    data: dict[str, Any] = Body(...),
) -> ValidationResponse:
    """Validate a record without storing it."""
    valid = await service.validate(data, schema_id)
    return ValidationResponse(valid=valid)


@router.get(
    "/{schema_id}/search",
    status_code=status.HTTP_200_OK,
    response_model=RecordListResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def search_records(
    schema_id: str,
    service: Data,
    q: str = Query(default="", description="Case-insensitive substring to look for"),
) -> RecordListResponse:
    """Search every field of every record in a collection."""
    records = await service.search_child_data(schema_id, q)

    logger.debug("Records searched", schema_id=schema_id, matches=len(records))

    return RecordListResponse(items=records, total=len(records))


@router.get(
    "/{schema_id}/children/{field}",
    status_code=status.HTTP_200_OK,
    response_model=RecordListResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Schema or relationship not found"},
    },
)
async def list_child_records(schema_id: str, field: str, service: Data) -> RecordListResponse:
    """List the records a relationship field can point at."""
    records = await service.get_child_data(schema_id, field)
    return RecordListResponse(items=records, total=len(records))


@router.post(
    "/{schema_id}",
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Structural or referential error"},
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def create_record(
    schema_id: str,
    service: Data,
    data: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Create a record.

    Relationship fields are stored as reference stubs; ``uuid``, timestamps
    and ``_schemaId`` are assigned by the server.
    """
    return await service.create(schema_id, data)


@router.get(
    "/{schema_id}",
    status_code=status.HTTP_200_OK,
    response_model=RecordListResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def list_records(schema_id: str, service: Data) -> RecordListResponse:
    """List every record of a schema."""
    records = await service.get_all(schema_id)
    return RecordListResponse(items=records, total=len(records))


@router.get(
    "/{schema_id}/{record_id}",
    status_code=status.HTTP_200_OK,
    response_model=None,
    responses={
        404: {"model": ErrorResponse, "description": "Schema or record not found"},
    },
)
async def get_record(
    schema_id: str,
    record_id: str,
    service: Data,
) -> dict[str, Any] | JSONResponse:
    """Get a record by its uuid. Reference stubs are not expanded."""
    record = await service.get(schema_id, record_id)

    if record is None:
        logger.info("Record not found", schema_id=schema_id, record_id=record_id)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "record_not_found",
                "message": f"Record '{record_id}' not found",
                "schema_id": schema_id,
                "record_id": record_id,
            },
        )

    return record


@router.patch(
    "/{schema_id}/{record_id}",
    status_code=status.HTTP_200_OK,
    responses={
        404: {"model": ErrorResponse, "description": "Schema or record not found"},
    },
)
async def update_record(
    schema_id: str,
    record_id: str,
    service: Data,
    patch: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Apply a partial update to a record.

    Undeclared fields are dropped. The merged record is not re-validated.
    """
    return await service.update(schema_id, record_id, patch)


@router.delete(
    "/{schema_id}/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Record deleted (or never existed)"},
        404: {"model": ErrorResponse, "description": "Schema not found"},
    },
)
async def delete_record(schema_id: str, record_id: str, service: Data) -> Response:
    """Delete a record. References to it are left dangling."""
    await service.delete(schema_id, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
