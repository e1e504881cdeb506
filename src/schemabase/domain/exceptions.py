"""Domain errors raised by the schema registry and the data service.

Every error carries a stable ``code`` plus enough context (schema id,
field, record id) to diagnose the failure without exposing store internals.
"""

from typing import Any


class SchemaBaseError(Exception):
    """Base class for all SchemaBase domain errors."""

    code = "schemabase_error"

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)


class SchemaNotFoundError(SchemaBaseError):
    """Raised when a schema id does not resolve."""

    code = "schema_not_found"

    def __init__(self, schema_id: str) -> None:
        self.schema_id = schema_id
        super().__init__(f"Schema with id '{schema_id}' not found", schema_id=schema_id)


class InvalidDefinitionError(SchemaBaseError):
    """Raised when a schema name or definition is malformed."""

    code = "invalid_definition"

    def __init__(self, errors: list[Any]) -> None:
        self.errors = errors
        details = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(
            f"Invalid schema definition: {details}",
            errors=[{"field": e.field, "message": e.message, "code": e.code} for e in errors],
        )


class StructuralValidationError(SchemaBaseError):
    """Raised when a record does not match its schema's shape."""

    code = "structural_validation_failed"

    def __init__(self, schema_id: str, violations: list[str]) -> None:
        self.schema_id = schema_id
        self.violations = violations
        super().__init__(
            f"Validation failed: {'; '.join(violations)}",
            schema_id=schema_id,
            violations=violations,
        )


class ReferentialIntegrityError(SchemaBaseError):
    """Raised when a relationship field points at a record that does not exist."""

    code = "referential_integrity_failed"

    def __init__(self, field: str, missing_id: str | None, schema_id: str) -> None:
        self.field = field
        self.missing_id = missing_id
        self.schema_id = schema_id
        if missing_id is None:
            message = f"Referenced {field} has no uuid"
        else:
            message = f"Referenced {field} with uuid {missing_id} not found"
        super().__init__(
            message,
            field=field,
            missing_id=missing_id,
            referenced_schema_id=schema_id,
        )


class NoSuchRelationshipError(SchemaBaseError):
    """Raised when a field is not a relationship field of the schema."""

    code = "no_such_relationship"

    def __init__(self, schema_id: str, field: str) -> None:
        self.schema_id = schema_id
        self.field = field
        super().__init__(
            f"No child schema found for field {field}",
            schema_id=schema_id,
            field=field,
        )


class RecordNotFoundError(SchemaBaseError):
    """Raised when a record id does not resolve in its collection."""

    code = "record_not_found"

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(
            f"Record '{record_id}' not found in collection '{collection}'",
            collection=collection,
            record_id=record_id,
        )


class StoreUnavailableError(SchemaBaseError):
    """Raised when the underlying document store fails."""

    code = "store_unavailable"

    def __init__(self, operation: str, collection: str | None = None) -> None:
        self.operation = operation
        self.collection = collection
        super().__init__(
            f"Document store failed during {operation}",
            operation=operation,
            collection=collection,
        )
