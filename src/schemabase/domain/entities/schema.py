"""Schema entity and the typed property-definition tree.

A schema definition arrives as a JSON-Schema-like mapping. It is parsed
into a closed set of property variants so relationship discovery and
structural validation walk a typed tree instead of untyped data. Every
variant keeps the mapping it was parsed from, so a definition round-trips
exactly: ``SchemaDefinition.from_dict(d).to_dict() == d``.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Union

PRIMITIVE_TYPES = frozenset({"string", "number", "integer", "boolean", "null"})
OBJECT_TYPE = "object"
ARRAY_TYPE = "array"
PROPERTY_TYPES = PRIMITIVE_TYPES | {OBJECT_TYPE, ARRAY_TYPE}

# Key marking a property as a relationship to another schema
SCHEMA_ID_KEY = "schemaId"


@dataclass
class PrimitiveProperty:
    """A scalar field (string, number, integer, boolean, null)."""

    type: str
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)


@dataclass
class ObjectProperty:
    """A nested object that is stored inline."""

    properties: dict[str, "PropertyDefinition"]
    required: list[str] | None = None
    additional_properties: bool | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    type = OBJECT_TYPE

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)


@dataclass
class ArrayProperty:
    """A list of inline values."""

    items: "PropertyDefinition | None" = None
    raw: dict[str, Any] = field(default_factory=dict)

    type = ARRAY_TYPE

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)


@dataclass
class ObjectRefProperty:
    """A single reference to a record of another schema."""

    schema_id: str
    raw: dict[str, Any] = field(default_factory=dict)

    type = OBJECT_TYPE

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)


@dataclass
class ArrayRefProperty:
    """A list of references to records of another schema."""

    item_schema_id: str
    raw: dict[str, Any] = field(default_factory=dict)

    type = ARRAY_TYPE

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.raw)


PropertyDefinition = Union[
    PrimitiveProperty,
    ObjectProperty,
    ArrayProperty,
    ObjectRefProperty,
    ArrayRefProperty,
]


def parse_property(raw: Mapping[str, Any]) -> PropertyDefinition:
    """Parse a raw property mapping into its typed variant.

    Args:
        raw: The property mapping as supplied by the caller.

    Returns:
        The matching PropertyDefinition variant.
    """
    raw = dict(raw)
    prop_type = raw.get("type")

    if prop_type == OBJECT_TYPE:
        if raw.get(SCHEMA_ID_KEY):
            return ObjectRefProperty(schema_id=raw[SCHEMA_ID_KEY], raw=raw)
        nested = raw.get("properties") or {}
        return ObjectProperty(
            properties={name: parse_property(p) for name, p in nested.items()},
            required=raw.get("required"),
            additional_properties=raw.get("additionalProperties"),
            raw=raw,
        )

    if prop_type == ARRAY_TYPE:
        items = raw.get("items")
        if isinstance(items, Mapping):
            if items.get(SCHEMA_ID_KEY):
                return ArrayRefProperty(item_schema_id=items[SCHEMA_ID_KEY], raw=raw)
            return ArrayProperty(items=parse_property(items), raw=raw)
        return ArrayProperty(items=None, raw=raw)

    return PrimitiveProperty(type=str(prop_type), raw=raw)


@dataclass
class SchemaDefinition:
    """The structural descriptor of a schema.

    Attributes:
        properties: Declared properties by name.
        required: Required property names, or None when not declared.
        additional_properties: Whether undeclared keys are allowed, or None
            when not declared (permissive).
        extra: Any other top-level keys, preserved for round-tripping.
    """

    properties: dict[str, PropertyDefinition]
    required: list[str] | None = None
    additional_properties: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SchemaDefinition":
        """Build a definition from its persisted mapping form.

        Raises:
            ValueError: If the mapping has no properties mapping.
        """
        properties = raw.get("properties")
        if not isinstance(properties, Mapping):
            raise ValueError("Schema definition must contain a 'properties' mapping")

        extra = {
            key: copy.deepcopy(value)
            for key, value in raw.items()
            if key not in ("properties", "required", "additionalProperties")
        }
        return cls(
            properties={name: parse_property(p) for name, p in properties.items()},
            required=list(raw["required"]) if "required" in raw else None,
            additional_properties=raw.get("additionalProperties"),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the definition back to its persisted mapping form."""
        result = copy.deepcopy(self.extra)
        result["properties"] = {name: p.to_dict() for name, p in self.properties.items()}
        if self.required is not None:
            result["required"] = list(self.required)
        if self.additional_properties is not None:
            result["additionalProperties"] = self.additional_properties
        return result

    def to_json_schema(self) -> dict[str, Any]:
        """Render the definition as a JSON Schema for a whole record."""
        json_schema = self.to_dict()
        json_schema["type"] = OBJECT_TYPE
        return json_schema

    @property
    def property_names(self) -> list[str]:
        return list(self.properties)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Schema:
    """Schema entity: a named record shape plus its collection metadata.

    Attributes:
        id: Unique identifier (UUID string), immutable once created.
        name: Schema name, also the name of the records' collection.
        definition: Structural descriptor of the records.
        table_ref: Collection name once storage has been bootstrapped.
        is_table_initialized: True once the collection's bootstrap record exists.
        created_at: When the schema was created.
        last_updated_at: When the schema was last changed.
    """

    id: str
    name: str
    definition: SchemaDefinition
    table_ref: str | None = None
    is_table_initialized: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    last_updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate schema data after initialization."""
        if not self.id:
            raise ValueError("Schema ID is required")
        if not self.name:
            raise ValueError("Schema name is required")

    @property
    def collection(self) -> str:
        """Name of the collection holding this schema's records.

        Always the schema name. ``table_ref`` only records what
        bootstrapping wrote and is never used to locate records, so a new
        ``table_ref`` does not move data, and a rename leaves existing
        records under the old name.
        """
        return self.name
