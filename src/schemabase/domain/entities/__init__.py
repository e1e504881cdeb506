"""Domain entities for SchemaBase.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from schemabase.domain.entities.record import (
    CREATED_AT_FIELD,
    DERIVED_FIELDS,
    METADATA_RECORD_ID,
    RECORD_ID_FIELD,
    REF_FLAG_FIELD,
    SCHEMA_ID_FIELD,
    UPDATED_AT_FIELD,
    make_reference_stub,
)
from schemabase.domain.entities.schema import (
    PROPERTY_TYPES,
    SCHEMA_ID_KEY,
    ArrayProperty,
    ArrayRefProperty,
    ObjectProperty,
    ObjectRefProperty,
    PrimitiveProperty,
    PropertyDefinition,
    Schema,
    SchemaDefinition,
    parse_property,
)

__all__ = [
    "ArrayProperty",
    "ArrayRefProperty",
    "CREATED_AT_FIELD",
    "DERIVED_FIELDS",
    "METADATA_RECORD_ID",
    "ObjectProperty",
    "ObjectRefProperty",
    "PROPERTY_TYPES",
    "PrimitiveProperty",
    "PropertyDefinition",
    "RECORD_ID_FIELD",
    "REF_FLAG_FIELD",
    "SCHEMA_ID_FIELD",
    "SCHEMA_ID_KEY",
    "Schema",
    "SchemaDefinition",
    "UPDATED_AT_FIELD",
    "make_reference_stub",
    "parse_property",
]
