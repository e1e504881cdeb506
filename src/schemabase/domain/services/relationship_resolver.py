"""Relationship discovery for schema definitions.

A property is a relationship iff it carries a ``schemaId``: directly on an
``object`` property (single reference) or on the ``items`` of an ``array``
property (list of references). Validation and reference normalization both
read this map, so they always agree on which fields are relationships.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from schemabase.domain.entities.schema import (
    ArrayRefProperty,
    ObjectRefProperty,
    SchemaDefinition,
)


@dataclass(frozen=True)
class Relationship:
    """A field's link to another schema.

    Attributes:
        schema_id: Id of the referenced schema.
        is_array: True for a list of references, False for a single one.
    """

    schema_id: str
    is_array: bool


def resolve_relationships(
    definition: SchemaDefinition | Mapping[str, Any],
) -> dict[str, Relationship]:
    """Map each relationship field of a definition to its target schema.

    Args:
        definition: A parsed definition or its raw mapping form.

    Returns:
        Field name -> Relationship, in declaration order. Non-relationship
        fields are absent.
    """
    if not isinstance(definition, SchemaDefinition):
        definition = SchemaDefinition.from_dict(definition)

    relationships: dict[str, Relationship] = {}
    for name, prop in definition.properties.items():
        if isinstance(prop, ObjectRefProperty):
            relationships[name] = Relationship(schema_id=prop.schema_id, is_array=False)
        elif isinstance(prop, ArrayRefProperty):
            relationships[name] = Relationship(schema_id=prop.item_schema_id, is_array=True)
    return relationships
