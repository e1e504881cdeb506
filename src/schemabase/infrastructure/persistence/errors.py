"""Translation of database failures into domain errors."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from schemabase.core.logging import get_logger
from schemabase.domain.exceptions import StoreUnavailableError

logger = get_logger(__name__)


@contextmanager
def translate_store_errors(operation: str, collection: str | None = None) -> Iterator[None]:
    """Re-raise any SQLAlchemy failure as StoreUnavailableError.

    The driver error is logged here and chained, never returned to callers.

    Args:
        operation: Name of the store operation, for logs and the error.
        collection: Collection involved, if any.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            "Document store operation failed",
            operation=operation,
            collection=collection,
            error=str(e),
            exc_type=type(e).__name__,
        )
        raise StoreUnavailableError(operation, collection) from e
