import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from schemabase.core.config import Settings
from schemabase.domain.exceptions import (
    NoSuchRelationshipError,
    RecordNotFoundError,
    ReferentialIntegrityError,
    SchemaNotFoundError,
    StructuralValidationError,
)
from schemabase.domain.services import DataService, SchemaRegistry
from schemabase.infrastructure.persistence.database import DatabaseManager
from schemabase.infrastructure.persistence.stores import SqlDocumentStore

DERIVED = {"uuid", "createdAt", "lastUpdatedAt", "_schemaId"}


# --- validate ---


@pytest.mark.asyncio
async def test_validate_passes(data_service, author_schema):
    assert await data_service.validate({"name": "Ada"}, author_schema.id) is True


@pytest.mark.asyncio
async def test_validate_unknown_schema(data_service):
    with pytest.raises(SchemaNotFoundError):
        await data_service.validate({"name": "Ada"}, "nope")


@pytest.mark.asyncio
async def test_validate_structural_failure(data_service, author_schema):
    with pytest.raises(StructuralValidationError) as exc_info:
        await data_service.validate({"email": 5}, author_schema.id)

    violations = exc_info.value.violations
    assert len(violations) == 2
    assert violations[0].startswith("$: ")
    assert violations[1].startswith("$.email: ")


@pytest.mark.asyncio
async def test_validate_reads_each_referenced_item_once(registry, author_schema, book_schema):
    store = MagicMock()
    store.get_record = AsyncMock(return_value={"uuid": "x"})
    service = DataService(registry, store)

    await service.validate(
        {
            "title": "T",
            "author": {"uuid": "a1"},
            "contributors": [{"uuid": "a2"}, {"uuid": "a3"}],
        },
        book_schema.id,
    )

    assert [c.args for c in store.get_record.await_args_list] == [
        ("authors", "a1"),
        ("authors", "a2"),
        ("authors", "a3"),
    ]


@pytest.mark.asyncio
async def test_validate_skips_absent_and_null_references(registry, book_schema):
    store = MagicMock()
    store.get_record = AsyncMock()
    service = DataService(registry, store)

    await service.validate({"title": "T"}, book_schema.id)

    store.get_record.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_reference_without_uuid(data_service, book_schema):
    with pytest.raises(ReferentialIntegrityError) as exc_info:
        await data_service.validate({"title": "T", "author": {"name": "Ada"}}, book_schema.id)

    assert exc_info.value.field == "author"
    assert exc_info.value.missing_id is None


@pytest.mark.asyncio
async def test_validate_referenced_schema_missing(registry, data_service):
    orphan = await registry.create_schema(
        "orphans",
        {"properties": {"owner": {"type": "object", "schemaId": "deleted-schema"}}},
    )

    with pytest.raises(SchemaNotFoundError) as exc_info:
        await data_service.validate({"owner": {"uuid": "x"}}, orphan.id)

    assert exc_info.value.schema_id == "deleted-schema"


# --- create / get ---


@pytest.mark.asyncio
async def test_create_then_get_adds_exactly_derived_fields(data_service, author_schema):
    data = {"name": "Ada", "email": "ada@example.com"}

    created = await data_service.create(author_schema.id, data)
    fetched = await data_service.get(author_schema.id, created["uuid"])

    assert fetched == created
    assert set(fetched) == set(data) | DERIVED
    assert {k: fetched[k] for k in data} == data
    assert fetched["_schemaId"] == author_schema.id
    assert fetched["createdAt"] == fetched["lastUpdatedAt"]


@pytest.mark.asyncio
async def test_create_uses_id_factory(registry, store, author_schema):
    service = DataService(registry, store, id_factory=lambda: "rec-1")

    created = await service.create(author_schema.id, {"name": "Ada"})

    assert created["uuid"] == "rec-1"
    assert await service.get(author_schema.id, "rec-1") == created


@pytest.mark.asyncio
async def test_create_overwrites_caller_derived_fields(data_service, author_schema):
    created = await data_service.create(
        author_schema.id,
        {"name": "Ada", "uuid": "mine", "_schemaId": "other", "createdAt": "yesterday"},
    )

    assert created["uuid"] != "mine"
    assert created["_schemaId"] == author_schema.id
    assert created["createdAt"] != "yesterday"


@pytest.mark.asyncio
async def test_create_drops_undeclared_fields(data_service, author_schema):
    created = await data_service.create(author_schema.id, {"name": "Ada", "extra": 1})

    assert "extra" not in created
    assert "extra" not in await data_service.get(author_schema.id, created["uuid"])


@pytest.mark.asyncio
async def test_create_structural_failure_writes_nothing(data_service, author_schema):
    with pytest.raises(StructuralValidationError):
        await data_service.create(author_schema.id, {"email": "x"})

    assert await data_service.get_all(author_schema.id) == []


@pytest.mark.asyncio
async def test_create_single_reference_missing(data_service, book_schema):
    with pytest.raises(ReferentialIntegrityError) as exc_info:
        await data_service.create(book_schema.id, {"title": "T", "author": {"uuid": "ghost"}})

    assert exc_info.value.field == "author"
    assert exc_info.value.missing_id == "ghost"
    assert str(exc_info.value) == "Referenced author with uuid ghost not found"
    assert await data_service.get_all(book_schema.id) == []


@pytest.mark.asyncio
async def test_create_single_reference_becomes_stub(data_service, author_schema, book_schema):
    ada = await data_service.create(author_schema.id, {"name": "Ada"})

    book = await data_service.create(
        book_schema.id,
        {"title": "Notes", "author": {"uuid": ada["uuid"], "name": "Ada", "email": "x"}},
    )
    stored = await data_service.get(book_schema.id, book["uuid"])

    assert stored["author"] == {"uuid": ada["uuid"], "_ref": True}


@pytest.mark.asyncio
async def test_create_array_reference_one_missing(data_service, author_schema, book_schema):
    ada = await data_service.create(author_schema.id, {"name": "Ada"})

    with pytest.raises(ReferentialIntegrityError) as exc_info:
        await data_service.create(
            book_schema.id,
            {"title": "T", "contributors": [{"uuid": ada["uuid"]}, {"uuid": "ghost"}]},
        )

    assert exc_info.value.field == "contributors"
    assert exc_info.value.missing_id == "ghost"


@pytest.mark.asyncio
async def test_create_array_reference_preserves_order(data_service, author_schema, book_schema):
    ada = await data_service.create(author_schema.id, {"name": "Ada"})
    alan = await data_service.create(author_schema.id, {"name": "Alan"})

    book = await data_service.create(
        book_schema.id,
        {"title": "T", "contributors": [{"uuid": alan["uuid"]}, {"uuid": ada["uuid"], "name": "Ada"}]},
    )
    stored = await data_service.get(book_schema.id, book["uuid"])

    assert stored["contributors"] == [
        {"uuid": alan["uuid"], "_ref": True},
        {"uuid": ada["uuid"], "_ref": True},
    ]
    assert "author" not in stored


@pytest.mark.asyncio
async def test_get_missing_returns_none(data_service, author_schema):
    assert await data_service.get(author_schema.id, "nope") is None


@pytest.mark.asyncio
async def test_get_unknown_schema(data_service):
    with pytest.raises(SchemaNotFoundError):
        await data_service.get("nope", "x")


# --- update ---


@pytest.mark.asyncio
async def test_update_drops_undeclared_keys(registry, data_service):
    schema = await registry.create_schema(
        "pairs", {"properties": {"a": {"type": "integer"}, "b": {"type": "integer"}}}
    )
    created = await data_service.create(schema.id, {"a": 0, "b": 2})

    updated = await data_service.update(schema.id, created["uuid"], {"a": 1, "z": 9})
    stored = await data_service.get(schema.id, created["uuid"])

    assert updated == stored
    assert stored["a"] == 1
    assert stored["b"] == 2
    assert "z" not in stored


@pytest.mark.asyncio
async def test_update_never_touches_identity_fields(data_service, author_schema):
    created = await data_service.create(author_schema.id, {"name": "Ada"})

    updated = await data_service.update(
        author_schema.id,
        created["uuid"],
        {"name": "Ada L.", "uuid": "x", "createdAt": "x", "_schemaId": "x"},
    )

    assert updated["name"] == "Ada L."
    assert updated["uuid"] == created["uuid"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["_schemaId"] == author_schema.id
    assert updated["lastUpdatedAt"] >= created["lastUpdatedAt"]


@pytest.mark.asyncio
async def test_update_does_not_validate(data_service, author_schema):
    created = await data_service.create(author_schema.id, {"name": "Ada"})

    updated = await data_service.update(author_schema.id, created["uuid"], {"name": 42})

    assert updated["name"] == 42


@pytest.mark.asyncio
async def test_update_missing_record(data_service, author_schema):
    with pytest.raises(RecordNotFoundError):
        await data_service.update(author_schema.id, "nope", {"name": "x"})


# --- delete / get_all ---


@pytest.mark.asyncio
async def test_delete(data_service, author_schema):
    created = await data_service.create(author_schema.id, {"name": "Ada"})

    await data_service.delete(author_schema.id, created["uuid"])

    assert await data_service.get(author_schema.id, created["uuid"]) is None


@pytest.mark.asyncio
async def test_delete_missing_is_not_an_error(data_service, author_schema):
    await data_service.delete(author_schema.id, "nope")


@pytest.mark.asyncio
async def test_delete_does_not_cascade(data_service, author_schema, book_schema):
    ada = await data_service.create(author_schema.id, {"name": "Ada"})
    book = await data_service.create(book_schema.id, {"title": "T", "author": {"uuid": ada["uuid"]}})

    await data_service.delete(author_schema.id, ada["uuid"])

    stored = await data_service.get(book_schema.id, book["uuid"])
    assert stored["author"] == {"uuid": ada["uuid"], "_ref": True}


@pytest.mark.asyncio
async def test_get_all_tags_ids_and_skips_bootstrap_record(data_service, author_schema):
    await data_service.create_table_for_schema(author_schema.id)
    ada = await data_service.create(author_schema.id, {"name": "Ada"})
    alan = await data_service.create(author_schema.id, {"name": "Alan"})

    records = await data_service.get_all(author_schema.id)

    assert [r["id"] for r in records] == [ada["uuid"], alan["uuid"]]
    assert records[0]["name"] == "Ada"


# --- create_table_for_schema ---


@pytest.mark.asyncio
async def test_create_table_for_schema(data_service, store, author_schema):
    schema = await data_service.create_table_for_schema(author_schema.id)

    assert schema.is_table_initialized is True
    assert schema.table_ref == "authors"

    bootstrap = await store.get_record("authors", "_metadata")
    assert bootstrap["_metadata"]["schemaId"] == author_schema.id
    assert bootstrap["_metadata"]["schemaName"] == "authors"
    assert bootstrap["_metadata"]["isInitialized"] is True


@pytest.mark.asyncio
async def test_create_table_for_schema_twice(data_service, store, registry, author_schema):
    first = await data_service.create_table_for_schema(author_schema.id)
    bootstrap = await store.get_record("authors", "_metadata")

    second = await data_service.create_table_for_schema(author_schema.id)

    assert first.is_table_initialized is True
    assert second.is_table_initialized is True
    assert (await registry.get_schema(author_schema.id)).is_table_initialized is True
    assert await store.get_record("authors", "_metadata") == bootstrap


@pytest.mark.asyncio
async def test_create_table_for_unknown_schema(data_service):
    with pytest.raises(SchemaNotFoundError):
        await data_service.create_table_for_schema("nope")


@pytest.mark.asyncio
async def test_concurrent_create_table_writes_one_bootstrap_record(tmp_path, author_definition):
    settings = Settings(
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'bootstrap.db'}",
    )
    db = DatabaseManager(settings)
    await db.create_tables()
    try:
        registry = SchemaRegistry(db.session_factory)
        store = SqlDocumentStore(db.session_factory)
        service = DataService(registry, store)
        schema = await registry.create_schema("authors", author_definition)

        results = await asyncio.gather(
            *(service.create_table_for_schema(schema.id) for _ in range(5))
        )

        assert all(result.is_table_initialized for result in results)
        assert {result.table_ref for result in results} == {"authors"}
        records = await store.list_records("authors")
        assert [r["id"] for r in records] == ["_metadata"]
    finally:
        await db.disconnect()


# --- bootstrap record is not a data record ---


@pytest.mark.asyncio
async def test_bootstrap_record_is_not_a_valid_reference(data_service, author_schema, book_schema):
    await data_service.create_table_for_schema(author_schema.id)

    with pytest.raises(ReferentialIntegrityError) as exc_info:
        await data_service.create(
            book_schema.id, {"title": "T", "author": {"uuid": "_metadata"}}
        )

    assert exc_info.value.field == "author"
    assert exc_info.value.missing_id == "_metadata"
    assert await data_service.get_all(book_schema.id) == []


@pytest.mark.asyncio
async def test_bootstrap_record_in_array_reference(data_service, author_schema, book_schema):
    await data_service.create_table_for_schema(author_schema.id)
    ada = await data_service.create(author_schema.id, {"name": "Ada"})

    with pytest.raises(ReferentialIntegrityError) as exc_info:
        await data_service.validate(
            {"title": "T", "contributors": [{"uuid": ada["uuid"]}, {"uuid": "_metadata"}]},
            book_schema.id,
        )

    assert exc_info.value.field == "contributors"
    assert exc_info.value.missing_id == "_metadata"


@pytest.mark.asyncio
async def test_get_bootstrap_record_returns_none(data_service, author_schema):
    await data_service.create_table_for_schema(author_schema.id)

    assert await data_service.get(author_schema.id, "_metadata") is None


@pytest.mark.asyncio
async def test_update_bootstrap_record_is_not_found(data_service, store, author_schema):
    await data_service.create_table_for_schema(author_schema.id)
    bootstrap = await store.get_record("authors", "_metadata")

    with pytest.raises(RecordNotFoundError):
        await data_service.update(author_schema.id, "_metadata", {"name": "x"})

    assert await store.get_record("authors", "_metadata") == bootstrap


@pytest.mark.asyncio
async def test_delete_bootstrap_record_is_ignored(data_service, store, registry, author_schema):
    await data_service.create_table_for_schema(author_schema.id)

    await data_service.delete(author_schema.id, "_metadata")

    assert await store.get_record("authors", "_metadata") is not None
    assert (await registry.get_schema(author_schema.id)).is_table_initialized is True


# --- child data ---


@pytest.mark.asyncio
async def test_get_child_data(data_service, author_schema, book_schema):
    ada = await data_service.create(author_schema.id, {"name": "Ada"})

    children = await data_service.get_child_data(book_schema.id, "contributors")

    assert [c["id"] for c in children] == [ada["uuid"]]


@pytest.mark.asyncio
async def test_get_child_data_not_a_relationship(data_service, book_schema):
    with pytest.raises(NoSuchRelationshipError) as exc_info:
        await data_service.get_child_data(book_schema.id, "title")

    assert str(exc_info.value) == "No child schema found for field title"


def _sequential_ids(prefix: str):
    counter = iter(range(1, 1000))
    return lambda: f"{prefix}-{next(counter)}"


@pytest.mark.asyncio
async def test_search_child_data(session_factory, store):
    registry = SchemaRegistry(session_factory, id_factory=_sequential_ids("schema"))
    service = DataService(registry, store, id_factory=_sequential_ids("note"))
    schema = await registry.create_schema(
        "notes",
        {"properties": {"text": {"type": "string"}, "flag": {"type": "boolean"}}},
    )
    first = await service.create(schema.id, {"text": "xxABCxx"})
    await service.create(schema.id, {"text": "nothing here"})
    third = await service.create(schema.id, {"text": "abc at start"})

    results = await service.search_child_data(schema.id, "abc")

    assert [r["id"] for r in results] == [first["uuid"], third["uuid"]]


@pytest.mark.asyncio
async def test_search_child_data_stringifies_values(session_factory, store):
    registry = SchemaRegistry(session_factory, id_factory=_sequential_ids("schema"))
    service = DataService(registry, store, id_factory=_sequential_ids("flag"))
    schema = await registry.create_schema(
        "flags",
        {
            "properties": {
                "flag": {"type": "boolean"},
                "count": {"type": "integer"},
                "meta": {"type": "object"},
            }
        },
    )
    flagged = await service.create(schema.id, {"flag": True, "count": 1})
    counted = await service.create(schema.id, {"flag": False, "count": -987})
    nested = await service.create(schema.id, {"meta": {"k": "v"}})

    assert [r["id"] for r in await service.search_child_data(schema.id, "TRUE")] == [
        flagged["uuid"]
    ]
    assert [r["id"] for r in await service.search_child_data(schema.id, "-987")] == [
        counted["uuid"]
    ]
    assert [r["id"] for r in await service.search_child_data(schema.id, '{"k":"v"}')] == [
        nested["uuid"]
    ]
