"""Generic data service for schema-driven records.

Orchestrates schema lookup, relationship resolution, structural and
referential validation, reference normalization and collection CRUD.

Consistency notes:
    * The referential check reads each referenced record once, in order,
      before ``create`` writes. A referenced record deleted between the
      check and the write leaves a dangling stub; the store offers no
      transaction to close that window.
    * Deletes never cascade. Stubs pointing at deleted records dangle.
    * ``create`` validates fully; ``update`` only filters undeclared keys.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from schemabase.core.logging import get_logger
from schemabase.domain.entities import (
    CREATED_AT_FIELD,
    DERIVED_FIELDS,
    METADATA_RECORD_ID,
    RECORD_ID_FIELD,
    SCHEMA_ID_FIELD,
    UPDATED_AT_FIELD,
    Schema,
    make_reference_stub,
)
from schemabase.domain.exceptions import (
    NoSuchRelationshipError,
    RecordNotFoundError,
    ReferentialIntegrityError,
    SchemaNotFoundError,
    StructuralValidationError,
)
from schemabase.domain.services.relationship_resolver import (
    Relationship,
    resolve_relationships,
)
from schemabase.domain.services.schema_registry import SchemaRegistry
from schemabase.domain.services.structural_validator import StructuralValidatorFactory
from schemabase.infrastructure.persistence.stores import DocumentStore

logger = get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _stringify(value: Any) -> str:
    """Render a field value for substring search."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def _is_present(data: Mapping[str, Any], field: str) -> bool:
    return data.get(field) is not None


def _as_items(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _reference_id(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get(RECORD_ID_FIELD)
    return None


def _is_bootstrap_record(record_id: Any) -> bool:
    """The bootstrap record shares the collection but is never a data record."""
    return record_id == METADATA_RECORD_ID


class DataService:
    """Service for CRUD over the records of registered schemas."""

    def __init__(
        self,
        registry: SchemaRegistry,
        store: DocumentStore,
        validator_factory: StructuralValidatorFactory | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            registry: Schema registry used to resolve schema ids.
            store: Document store holding the record collections.
            validator_factory: Compiles definitions into structural validators.
            id_factory: Generator for new record ids. Defaults to UUID4 strings.
        """
        self.registry = registry
        self.store = store
        self.validator_factory = validator_factory or StructuralValidatorFactory()
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

    async def _require_schema(self, schema_id: str) -> Schema:
        schema = await self.registry.get_schema(schema_id)
        if schema is None:
            logger.info("Schema lookup failed", schema_id=schema_id)
            raise SchemaNotFoundError(schema_id)
        return schema

    async def validate(self, data: Mapping[str, Any], schema_id: str) -> bool:
        """Validate a record's shape and its references.

        Args:
            data: The candidate record.
            schema_id: Id of the schema to validate against.

        Returns:
            True when both passes succeed.

        Raises:
            SchemaNotFoundError: If the schema (or a referenced schema) is unknown.
            StructuralValidationError: If the record does not match the shape.
            ReferentialIntegrityError: If a referenced record does not exist.
        """
        schema = await self._require_schema(schema_id)
        relationships = resolve_relationships(schema.definition)
        await self._validate_against(schema, relationships, data)
        return True

    async def _validate_against(
        self,
        schema: Schema,
        relationships: dict[str, Relationship],
        data: Mapping[str, Any],
    ) -> None:
        outcome = self.validator_factory.compile(schema.definition).check(data)
        if not outcome.ok:
            logger.info(
                "Structural validation failed",
                schema_id=schema.id,
                violation_count=len(outcome.violations),
            )
            raise StructuralValidationError(schema.id, outcome.violations)

        # One awaited read per referenced item: no batching, no caching
        for field, relationship in relationships.items():
            if not _is_present(data, field):
                continue

            target = await self._require_schema(relationship.schema_id)
            for item in _as_items(data[field]):
                ref_id = _reference_id(item)
                if not isinstance(ref_id, str) or not ref_id:
                    raise ReferentialIntegrityError(field, None, relationship.schema_id)

                referenced = None
                if not _is_bootstrap_record(ref_id):
                    referenced = await self.store.get_record(target.collection, ref_id)
                if referenced is None:
                    logger.info(
                        "Referential integrity check failed",
                        schema_id=schema.id,
                        field=field,
                        missing_id=ref_id,
                    )
                    raise ReferentialIntegrityError(field, ref_id, relationship.schema_id)

    async def create(self, schema_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """Validate, normalize and persist a new record.

        Undeclared keys are not persisted. Relationship fields are replaced
        by reference stubs, keeping input order for arrays. ``uuid``,
        timestamps and ``_schemaId`` are always assigned here.

        Returns:
            The document as written (not re-read from the store).
        """
        schema = await self._require_schema(schema_id)
        relationships = resolve_relationships(schema.definition)
        await self._validate_against(schema, relationships, data)

        record_id = self.id_factory()
        timestamp = _timestamp()

        declared = set(schema.definition.property_names)
        document: dict[str, Any] = {
            key: value
            for key, value in data.items()
            if key in declared and key not in DERIVED_FIELDS
        }

        for field, relationship in relationships.items():
            if not _is_present(data, field):
                continue
            if relationship.is_array:
                document[field] = [
                    make_reference_stub(_reference_id(item)) for item in _as_items(data[field])
                ]
            else:
                document[field] = make_reference_stub(_reference_id(data[field]))

        document.update(
            {
                RECORD_ID_FIELD: record_id,
                CREATED_AT_FIELD: timestamp,
                UPDATED_AT_FIELD: timestamp,
                SCHEMA_ID_FIELD: schema_id,
            }
        )

        await self.store.create_record(schema.collection, record_id, document)

        logger.info(
            "Record created",
            schema_id=schema_id,
            collection=schema.collection,
            record_id=record_id,
        )
        return document

    async def get(self, schema_id: str, record_id: str) -> dict[str, Any] | None:
        """Read a record. Reference stubs are returned as stored.

        Returns:
            The record, or None if it does not exist.
        """
        schema = await self._require_schema(schema_id)
        if _is_bootstrap_record(record_id):
            return None
        return await self.store.get_record(schema.collection, record_id)

    async def update(
        self, schema_id: str, record_id: str, patch: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Apply a tolerant patch to a stored record.

        Keys not declared by the schema are dropped without error. The
        merged record is not re-validated, structurally or referentially;
        callers send pre-validated partial patches. ``uuid``, ``createdAt``
        and ``_schemaId`` are never changed.

        Returns:
            The merged record.

        Raises:
            SchemaNotFoundError: If the schema is unknown.
            RecordNotFoundError: If the record does not exist.
        """
        schema = await self._require_schema(schema_id)
        if _is_bootstrap_record(record_id):
            raise RecordNotFoundError(schema.collection, record_id)

        declared = set(schema.definition.property_names)
        filtered = {
            key: value
            for key, value in patch.items()
            if key in declared and key not in DERIVED_FIELDS
        }

        dropped = sorted(set(patch) - set(filtered))
        if dropped:
            logger.debug(
                "Dropping undeclared fields from update",
                schema_id=schema_id,
                record_id=record_id,
                fields=dropped,
            )

        filtered[UPDATED_AT_FIELD] = _timestamp()
        updated = await self.store.update_record(schema.collection, record_id, filtered)

        logger.info(
            "Record updated",
            schema_id=schema_id,
            record_id=record_id,
            field_count=len(filtered) - 1,
        )
        return updated

    async def delete(self, schema_id: str, record_id: str) -> None:
        """Delete a record. A missing record is not an error."""
        schema = await self._require_schema(schema_id)
        if _is_bootstrap_record(record_id):
            logger.debug("Ignoring delete of bootstrap record", schema_id=schema_id)
            return
        await self.store.delete_record(schema.collection, record_id)
        logger.info("Record deleted", schema_id=schema_id, record_id=record_id)

    async def get_all(self, schema_id: str) -> list[dict[str, Any]]:
        """List every record of a schema's collection, each tagged with ``id``.

        The collection bootstrap record is not a data record and is skipped.
        """
        schema = await self._require_schema(schema_id)
        records = await self.store.list_records(schema.collection)
        return [record for record in records if not _is_bootstrap_record(record.get("id"))]

    async def create_table_for_schema(self, schema_id: str) -> Schema:
        """Bootstrap a schema's collection and mark the schema initialized.

        The bootstrap record is written create-if-absent, so concurrent or
        repeated calls write it once and all end with the schema initialized.

        Returns:
            The updated schema.
        """
        schema = await self._require_schema(schema_id)

        timestamp = _timestamp()
        created = await self.store.create_record_if_absent(
            schema.collection,
            METADATA_RECORD_ID,
            {
                "_metadata": {
                    "schemaId": schema.id,
                    "schemaName": schema.name,
                    "createdAt": timestamp,
                    "lastUpdatedAt": timestamp,
                    "isInitialized": True,
                }
            },
        )
        if not created:
            logger.info(
                "Collection already bootstrapped",
                schema_id=schema_id,
                collection=schema.collection,
            )

        return await self.registry.update_schema_table_ref(schema.id, schema.collection)

    async def get_child_data(self, parent_schema_id: str, field_name: str) -> list[dict[str, Any]]:
        """List the records of the schema a relationship field points at.

        Raises:
            NoSuchRelationshipError: If the field is not a relationship field.
        """
        parent = await self._require_schema(parent_schema_id)
        relationships = resolve_relationships(parent.definition)

        relationship = relationships.get(field_name)
        if relationship is None:
            raise NoSuchRelationshipError(parent_schema_id, field_name)

        return await self.get_all(relationship.schema_id)

    async def search_child_data(self, child_schema_id: str, query: str) -> list[dict[str, Any]]:
        """Case-insensitive substring search across every field of a collection.

        A linear scan over the whole collection; order is preserved.
        """
        records = await self.get_all(child_schema_id)
        needle = query.casefold()
        return [
            record
            for record in records
            if any(needle in _stringify(value).casefold() for value in record.values())
        ]
