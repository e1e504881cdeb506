"""Schema registry service.

Owns schema definitions: registration, lookup, update, deletion and the
bookkeeping of each schema's record collection.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from schemabase.core.logging import get_logger
from schemabase.domain.entities import Schema, SchemaDefinition
from schemabase.domain.exceptions import InvalidDefinitionError, SchemaNotFoundError
from schemabase.domain.services.definition_validator import DefinitionValidator
from schemabase.domain.services.relationship_resolver import (
    Relationship,
    resolve_relationships,
)
from schemabase.infrastructure.persistence.errors import translate_store_errors
from schemabase.infrastructure.persistence.models import SchemaModel
from schemabase.infrastructure.persistence.repositories import SchemaRepository

logger = get_logger(__name__)

# Schema metadata a caller may change without touching the definition
METADATA_FIELDS = ("name",)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_entity(model: SchemaModel) -> Schema:
    return Schema(
        id=model.id,
        name=model.name,
        definition=SchemaDefinition.from_dict(json.loads(model.definition)),
        table_ref=model.table_ref,
        is_table_initialized=bool(model.is_table_initialized),
        created_at=_as_utc(model.created_at),
        last_updated_at=_as_utc(model.last_updated_at),
    )


class SchemaRegistry:
    """Service for schema registration and lookup.

    Each operation runs in its own session; there is no transaction
    spanning operations.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            session_factory: Factory for database sessions.
            id_factory: Generator for new schema ids. Defaults to UUID4 strings.
        """
        self.session_factory = session_factory
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

    async def create_schema(self, name: str, definition: Mapping[str, Any]) -> Schema:
        """Register a new schema.

        Args:
            name: Schema name, also used as its record collection name.
            definition: Definition with a ``properties`` mapping and optional
                ``required`` list and ``additionalProperties`` flag.

        Returns:
            The created schema.

        Raises:
            InvalidDefinitionError: If the name or definition is malformed.
        """
        errors = DefinitionValidator.validate(name, definition)
        if errors:
            logger.info(
                "Schema creation failed: invalid definition",
                schema_name=name,
                error_count=len(errors),
            )
            raise InvalidDefinitionError(errors)

        parsed = SchemaDefinition.from_dict(definition)
        now = _utcnow()
        model = SchemaModel(
            id=self.id_factory(),
            name=name,
            definition=json.dumps(parsed.to_dict()),
            table_ref=None,
            is_table_initialized=False,
            created_at=now,
            last_updated_at=now,
        )

        with translate_store_errors("create_schema"):
            async with self.session_factory() as session:
                await SchemaRepository(session).create(model)
                await session.commit()

        logger.info(
            "Schema created",
            schema_id=model.id,
            schema_name=name,
            property_count=len(parsed.properties),
        )
        return _to_entity(model)

    async def get_schema(self, schema_id: str) -> Schema | None:
        """Get a schema by id.

        Returns:
            The schema, or None if no schema has this id.
        """
        with translate_store_errors("get_schema"):
            async with self.session_factory() as session:
                model = await SchemaRepository(session).get_by_id(schema_id)

        if model is None:
            return None
        return _to_entity(model)

    async def get_all_schemas(self) -> list[Schema]:
        """List every registered schema."""
        with translate_store_errors("get_all_schemas"):
            async with self.session_factory() as session:
                models = await SchemaRepository(session).list_all()

        return [_to_entity(model) for model in models]

    async def update_schema(self, schema_id: str, patch: Mapping[str, Any]) -> Schema:
        """Update a schema.

        A patch carrying ``definition`` replaces the definition wholesale
        after re-validating it; nothing else in that patch is applied.
        Otherwise the metadata fields in the patch are merged and unknown
        keys are ignored. ``last_updated_at`` is refreshed either way.

        Raises:
            SchemaNotFoundError: If no schema has this id.
            InvalidDefinitionError: If the new definition or name is malformed.
        """
        with translate_store_errors("update_schema"):
            async with self.session_factory() as session:
                repository = SchemaRepository(session)
                model = await repository.get_by_id(schema_id)
                if model is None:
                    raise SchemaNotFoundError(schema_id)

                if "definition" in patch:
                    errors = DefinitionValidator.validate_definition(patch["definition"])
                    if errors:
                        raise InvalidDefinitionError(errors)
                    parsed = SchemaDefinition.from_dict(patch["definition"])
                    model.definition = json.dumps(parsed.to_dict())
                    changed = ["definition"]
                else:
                    changed = []
                    for key in METADATA_FIELDS:
                        if key not in patch:
                            continue
                        if key == "name":
                            errors = DefinitionValidator.validate_name(patch["name"])
                            if errors:
                                raise InvalidDefinitionError(errors)
                        setattr(model, key, patch[key])
                        changed.append(key)

                    ignored = sorted(set(patch) - set(METADATA_FIELDS))
                    if ignored:
                        logger.debug(
                            "Ignoring non-metadata schema fields",
                            schema_id=schema_id,
                            fields=ignored,
                        )

                model.last_updated_at = _utcnow()
                await repository.update(model)
                await session.commit()

        logger.info("Schema updated", schema_id=schema_id, changed=changed)
        return _to_entity(model)

    async def delete_schema(self, schema_id: str) -> None:
        """Delete a schema.

        The schema's record collection and its records are left in place.
        """
        with translate_store_errors("delete_schema"):
            async with self.session_factory() as session:
                deleted = await SchemaRepository(session).delete_by_id(schema_id)
                await session.commit()

        logger.info("Schema deleted", schema_id=schema_id, deleted=bool(deleted))

    async def update_schema_table_ref(self, schema_id: str, table_ref: str) -> Schema:
        """Record a schema's collection and mark it initialized.

        Returns:
            The schema as re-read after the write.

        Raises:
            SchemaNotFoundError: If the schema cannot be read back after the write.
        """
        with translate_store_errors("update_schema_table_ref"):
            async with self.session_factory() as session:
                repository = SchemaRepository(session)
                await repository.update_table_ref(schema_id, table_ref, _utcnow())
                await session.commit()

            async with self.session_factory() as session:
                model = await SchemaRepository(session).get_by_id(schema_id)

        if model is None:
            logger.error(
                "Schema missing after table reference update",
                schema_id=schema_id,
                table_ref=table_ref,
            )
            raise SchemaNotFoundError(schema_id)

        logger.info("Schema table reference updated", schema_id=schema_id, table_ref=table_ref)
        return _to_entity(model)

    async def get_relationships(self, schema_id: str) -> dict[str, Relationship]:
        """Resolve the relationship map of a registered schema.

        Raises:
            SchemaNotFoundError: If no schema has this id.
        """
        schema = await self.get_schema(schema_id)
        if schema is None:
            raise SchemaNotFoundError(schema_id)
        return resolve_relationships(schema.definition)
