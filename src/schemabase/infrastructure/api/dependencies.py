"""FastAPI dependencies for service access.

Services are built once in the application lifespan and kept on
``app.state``; these dependencies hand them to request handlers.
"""

from typing import Annotated

from fastapi import Depends, Request

from schemabase.domain.services import DataService, SchemaRegistry


def get_schema_registry(request: Request) -> SchemaRegistry:
    """Return the application's schema registry."""
    return request.app.state.schema_registry


def get_data_service(request: Request) -> DataService:
    """Return the application's data service."""
    return request.app.state.data_service


# Type aliases for use in route handlers
Registry = Annotated[SchemaRegistry, Depends(get_schema_registry)]
Data = Annotated[DataService, Depends(get_data_service)]
