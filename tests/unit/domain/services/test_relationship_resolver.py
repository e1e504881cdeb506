from schemabase.domain.entities import SchemaDefinition
from schemabase.domain.services.relationship_resolver import (
    Relationship,
    resolve_relationships,
)


def test_only_fields_with_schema_id_are_relationships():
    definition = {
        "properties": {
            "fieldA": {"type": "object"},
            "fieldB": {"type": "object", "schemaId": "S1"},
            "fieldC": {"type": "array", "items": {"schemaId": "S2"}},
        }
    }

    assert resolve_relationships(definition) == {
        "fieldB": Relationship(schema_id="S1", is_array=False),
        "fieldC": Relationship(schema_id="S2", is_array=True),
    }


def test_accepts_parsed_definition():
    definition = SchemaDefinition.from_dict(
        {"properties": {"owner": {"type": "object", "schemaId": "S1"}}}
    )
    assert resolve_relationships(definition) == {
        "owner": Relationship(schema_id="S1", is_array=False)
    }


def test_ignores_primitives_and_plain_arrays():
    definition = {
        "properties": {
            "title": {"type": "string"},
            "tags": {"type": "array", "items": {"type": "string"}},
            "scores": {"type": "array"},
        }
    }
    assert resolve_relationships(definition) == {}


def test_nested_schema_ids_are_not_top_level_relationships():
    definition = {
        "properties": {
            "meta": {
                "type": "object",
                "properties": {"owner": {"type": "object", "schemaId": "S1"}},
            }
        }
    }
    assert resolve_relationships(definition) == {}


def test_deterministic_and_ordered():
    definition = {
        "properties": {
            "z": {"type": "object", "schemaId": "S1"},
            "a": {"type": "array", "items": {"type": "object", "schemaId": "S2"}},
        }
    }
    first = resolve_relationships(definition)
    second = resolve_relationships(definition)

    assert first == second
    assert list(first) == ["z", "a"]
