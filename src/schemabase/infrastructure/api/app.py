"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from schemabase.core.config import Settings, get_settings
from schemabase.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from schemabase.domain.exceptions import (
    InvalidDefinitionError,
    NoSuchRelationshipError,
    RecordNotFoundError,
    ReferentialIntegrityError,
    SchemaBaseError,
    SchemaNotFoundError,
    StoreUnavailableError,
    StructuralValidationError,
)
from schemabase.domain.services import DataService, SchemaRegistry
from schemabase.infrastructure.persistence.database import DatabaseManager, init_database
from schemabase.infrastructure.persistence.stores import SqlDocumentStore

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type[SchemaBaseError], int] = {
    SchemaNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidDefinitionError: status.HTTP_400_BAD_REQUEST,
    StructuralValidationError: status.HTTP_400_BAD_REQUEST,
    ReferentialIntegrityError: status.HTTP_400_BAD_REQUEST,
    NoSuchRelationshipError: status.HTTP_404_NOT_FOUND,
    RecordNotFoundError: status.HTTP_404_NOT_FOUND,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def build_services(app: FastAPI, db: DatabaseManager) -> None:
    """Construct the registry and data service and attach them to ``app.state``.

    Args:
        app: FastAPI application instance.
        db: Database manager whose session factory the services share.
    """
    registry = SchemaRegistry(db.session_factory)
    store = SqlDocumentStore(db.session_factory)

    app.state.db = db
    app.state.document_store = store
    app.state.schema_registry = registry
    app.state.data_service = DataService(registry, store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database and builds the services on startup, and
    disposes the engine on shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings

    configure_logging(settings)

    logger.info(
        "Starting SchemaBase",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    db = DatabaseManager(settings)
    try:
        await init_database(db)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    build_services(app, db)

    yield

    logger.info("Shutting down SchemaBase")
    await db.disconnect()
    logger.info("Database connection closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. Loaded from environment if omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Runtime schema registry and schema-driven data service",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app, settings)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint.

        Returns 200 if the service is running. Does not check
        store connectivity.
        """
        return {
            "status": "healthy",
            "service": app.state.settings.app_name,
            "version": app.state.settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint.

        Returns 200 if the document store is reachable, 503 otherwise.
        """
        store = getattr(app.state, "document_store", None)
        store_healthy = store is not None and await store.check_connection()

        if store_healthy:
            return {
                "status": "ready",
                "service": app.state.settings.app_name,
                "version": app.state.settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": app.state.settings.app_name,
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
        settings: Settings providing the API prefix.
    """
    from schemabase.infrastructure.api.routes import data_router, schemas_router

    app.include_router(
        schemas_router, prefix=f"{settings.api_prefix}/schemas", tags=["schemas"]
    )
    app.include_router(data_router, prefix=f"{settings.api_prefix}/data", tags=["data"])

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        """API root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(SchemaBaseError)
    async def domain_exception_handler(request: Request, exc: SchemaBaseError):
        """Render domain errors as ``{"error", "message", **context}``."""
        status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)

        if isinstance(exc, StoreUnavailableError):
            logger.error(
                "Document store unavailable",
                path=str(request.url.path),
                method=request.method,
                operation=exc.operation,
                collection=exc.collection,
            )
            return JSONResponse(
                status_code=status_code,
                content={"error": exc.code, "message": "Document store unavailable"},
            )

        logger.info(
            "Request failed",
            path=str(request.url.path),
            method=request.method,
            error=exc.code,
            status_code=status_code,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message, **exc.context},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc) if app.state.settings.debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and propagate the correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


# Create the application instance
app = create_app()
