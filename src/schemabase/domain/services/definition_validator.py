"""Definition validation service for schema names and definitions.

Checks that a schema definition is well-formed before it is registered:
a properties mapping, typed properties, well-formed relationship markers,
and a definition that is itself a valid JSON Schema.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from schemabase.domain.entities.schema import (
    ARRAY_TYPE,
    OBJECT_TYPE,
    PROPERTY_TYPES,
    SCHEMA_ID_KEY,
)

# Pattern for valid schema names (the name doubles as the collection key)
NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


@dataclass
class DefinitionValidationError:
    """A single definition validation error."""

    field: str
    message: str
    code: str


class DefinitionValidator:
    """Validator for schema registration requests."""

    MAX_NAME_LENGTH = 128

    @classmethod
    def validate_name(cls, name: Any) -> list[DefinitionValidationError]:
        """Validate a schema name.

        Args:
            name: The schema name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        if not isinstance(name, str) or not name:
            return [
                DefinitionValidationError(
                    field="name",
                    message="Schema name is required",
                    code="name_required",
                )
            ]

        errors = []
        if len(name) > cls.MAX_NAME_LENGTH:
            errors.append(
                DefinitionValidationError(
                    field="name",
                    message=f"Schema name must be at most {cls.MAX_NAME_LENGTH} characters",
                    code="name_too_long",
                )
            )

        if not NAME_PATTERN.match(name):
            errors.append(
                DefinitionValidationError(
                    field="name",
                    message="Schema name must start with a letter and contain only letters, digits, underscores and hyphens",
                    code="name_invalid_format",
                )
            )

        return errors

    @classmethod
    def validate_property(cls, prop: Any, path: str) -> list[DefinitionValidationError]:
        """Validate a single property definition, recursing into nested shapes.

        Args:
            prop: The property definition.
            path: Dotted location of the property (for error messages).

        Returns:
            List of validation errors (empty if valid).
        """
        if not isinstance(prop, Mapping):
            return [
                DefinitionValidationError(
                    field=path,
                    message="Property definition must be an object",
                    code="property_not_object",
                )
            ]

        prop_type = prop.get("type")
        if not isinstance(prop_type, str) or not prop_type:
            return [
                DefinitionValidationError(
                    field=f"{path}.type",
                    message="Property type is required",
                    code="property_type_required",
                )
            ]

        if prop_type not in PROPERTY_TYPES:
            return [
                DefinitionValidationError(
                    field=f"{path}.type",
                    message=f"Invalid property type '{prop_type}'. Valid types: {', '.join(sorted(PROPERTY_TYPES))}",
                    code="property_type_invalid",
                )
            ]

        errors = []
        if prop_type == OBJECT_TYPE:
            if SCHEMA_ID_KEY in prop:
                errors.extend(cls._validate_schema_id(prop[SCHEMA_ID_KEY], f"{path}.{SCHEMA_ID_KEY}"))
            nested = prop.get("properties")
            if nested is not None:
                errors.extend(cls.validate_properties(nested, f"{path}.properties"))

        elif prop_type == ARRAY_TYPE:
            items = prop.get("items")
            if items is not None:
                if isinstance(items, Mapping) and SCHEMA_ID_KEY in items:
                    errors.extend(
                        cls._validate_schema_id(items[SCHEMA_ID_KEY], f"{path}.items.{SCHEMA_ID_KEY}")
                    )
                    if "type" in items and items["type"] != OBJECT_TYPE:
                        errors.append(
                            DefinitionValidationError(
                                field=f"{path}.items.type",
                                message="Referenced array items must be of type 'object'",
                                code="reference_items_not_object",
                            )
                        )
                else:
                    errors.extend(cls.validate_property(items, f"{path}.items"))

        return errors

    @classmethod
    def validate_properties(cls, properties: Any, path: str) -> list[DefinitionValidationError]:
        """Validate a properties mapping."""
        if not isinstance(properties, Mapping):
            return [
                DefinitionValidationError(
                    field=path,
                    message="Properties must be a mapping of property name to definition",
                    code="properties_not_mapping",
                )
            ]

        errors = []
        for name, prop in properties.items():
            errors.extend(cls.validate_property(prop, f"{path}.{name}"))
        return errors

    @classmethod
    def validate_definition(cls, definition: Any) -> list[DefinitionValidationError]:
        """Validate a complete schema definition.

        Args:
            definition: The definition mapping.

        Returns:
            List of validation errors (empty if valid).
        """
        if not isinstance(definition, Mapping):
            return [
                DefinitionValidationError(
                    field="definition",
                    message="Schema definition must be an object",
                    code="definition_not_object",
                )
            ]

        if "properties" not in definition:
            return [
                DefinitionValidationError(
                    field="definition.properties",
                    message="Schema definition must contain 'properties'",
                    code="properties_required",
                )
            ]

        errors = cls.validate_properties(definition["properties"], "definition.properties")

        required = definition.get("required")
        if required is not None and (
            not isinstance(required, list) or not all(isinstance(r, str) for r in required)
        ):
            errors.append(
                DefinitionValidationError(
                    field="definition.required",
                    message="Required must be a list of property names",
                    code="required_invalid",
                )
            )

        additional = definition.get("additionalProperties")
        if additional is not None and not isinstance(additional, bool):
            errors.append(
                DefinitionValidationError(
                    field="definition.additionalProperties",
                    message="additionalProperties must be a boolean",
                    code="additional_properties_invalid",
                )
            )

        # Only ask jsonschema once the shape is known to be sane
        if not errors:
            try:
                Draft202012Validator.check_schema({**definition, "type": OBJECT_TYPE})
            except SchemaError as e:
                errors.append(
                    DefinitionValidationError(
                        field="definition",
                        message=f"Not a valid JSON Schema: {e.message}",
                        code="json_schema_invalid",
                    )
                )

        return errors

    @classmethod
    def validate(cls, name: Any, definition: Any) -> list[DefinitionValidationError]:
        """Validate a schema name and definition together."""
        errors = []
        errors.extend(cls.validate_name(name))
        errors.extend(cls.validate_definition(definition))
        return errors

    @staticmethod
    def _validate_schema_id(value: Any, path: str) -> list[DefinitionValidationError]:
        if not isinstance(value, str) or not value.strip():
            return [
                DefinitionValidationError(
                    field=path,
                    message="schemaId must be a non-empty string",
                    code="schema_id_invalid",
                )
            ]
        return []
