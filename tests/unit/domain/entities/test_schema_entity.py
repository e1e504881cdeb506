import pytest

from schemabase.domain.entities import (
    ArrayProperty,
    ArrayRefProperty,
    ObjectProperty,
    ObjectRefProperty,
    PrimitiveProperty,
    Schema,
    SchemaDefinition,
    make_reference_stub,
    parse_property,
)


class TestParseProperty:

    def test_primitive(self):
        prop = parse_property({"type": "string", "maxLength": 10})
        assert isinstance(prop, PrimitiveProperty)
        assert prop.type == "string"

    def test_plain_object_recurses(self):
        prop = parse_property(
            {
                "type": "object",
                "properties": {"street": {"type": "string"}},
                "required": ["street"],
                "additionalProperties": False,
            }
        )
        assert isinstance(prop, ObjectProperty)
        assert isinstance(prop.properties["street"], PrimitiveProperty)
        assert prop.required == ["street"]
        assert prop.additional_properties is False

    def test_object_reference(self):
        prop = parse_property({"type": "object", "schemaId": "S1"})
        assert isinstance(prop, ObjectRefProperty)
        assert prop.schema_id == "S1"

    def test_array_of_primitives(self):
        prop = parse_property({"type": "array", "items": {"type": "number"}})
        assert isinstance(prop, ArrayProperty)
        assert isinstance(prop.items, PrimitiveProperty)

    def test_array_without_items(self):
        prop = parse_property({"type": "array"})
        assert isinstance(prop, ArrayProperty)
        assert prop.items is None

    def test_array_reference(self):
        prop = parse_property({"type": "array", "items": {"type": "object", "schemaId": "S2"}})
        assert isinstance(prop, ArrayRefProperty)
        assert prop.item_schema_id == "S2"


class TestSchemaDefinition:

    def test_round_trips_exactly(self):
        raw = {
            "title": "Book",
            "properties": {
                "title": {"type": "string", "minLength": 1, "description": "Book title"},
                "tags": {"type": "array", "items": {"type": "string", "enum": ["a", "b"]}},
                "author": {"type": "object", "schemaId": "S1", "description": "who"},
                "meta": {
                    "type": "object",
                    "properties": {"isbn": {"type": "string", "pattern": "^[0-9-]+$"}},
                },
            },
            "required": ["title"],
            "additionalProperties": False,
        }
        assert SchemaDefinition.from_dict(raw).to_dict() == raw

    def test_optional_keys_stay_absent(self):
        raw = {"properties": {"a": {"type": "integer"}}}
        definition = SchemaDefinition.from_dict(raw)

        assert definition.required is None
        assert definition.additional_properties is None
        assert definition.to_dict() == raw

    def test_json_schema_is_an_object_schema(self):
        definition = SchemaDefinition.from_dict({"properties": {"a": {"type": "integer"}}})
        assert definition.to_json_schema() == {
            "type": "object",
            "properties": {"a": {"type": "integer"}},
        }

    def test_property_names_in_declaration_order(self):
        definition = SchemaDefinition.from_dict(
            {"properties": {"b": {"type": "string"}, "a": {"type": "string"}}}
        )
        assert definition.property_names == ["b", "a"]

    def test_missing_properties_rejected(self):
        with pytest.raises(ValueError):
            SchemaDefinition.from_dict({"required": []})


class TestSchema:

    def test_collection_is_name(self):
        schema = Schema(
            id="s-1",
            name="books",
            definition=SchemaDefinition.from_dict({"properties": {}}),
        )
        assert schema.collection == "books"
        assert schema.is_table_initialized is False
        assert schema.table_ref is None

    def test_requires_id_and_name(self):
        definition = SchemaDefinition.from_dict({"properties": {}})
        with pytest.raises(ValueError, match="ID"):
            Schema(id="", name="books", definition=definition)
        with pytest.raises(ValueError, match="name"):
            Schema(id="s-1", name="", definition=definition)


def test_reference_stub():
    stub = make_reference_stub("abc")
    assert stub == {"uuid": "abc", "_ref": True}


def test_collection_ignores_table_ref():
    schema = Schema(
        id="s-1",
        name="books",
        definition=SchemaDefinition.from_dict({"properties": {}}),
        table_ref="library",
        is_table_initialized=True,
    )
    assert schema.collection == "books"
