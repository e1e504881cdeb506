"""API Routes for SchemaBase."""

from schemabase.infrastructure.api.routes.data_router import router as data_router
from schemabase.infrastructure.api.routes.schemas_router import router as schemas_router

__all__ = [
    "data_router",
    "schemas_router",
]
