"""Document store backed by the SQLAlchemy documents table.

Every operation opens its own session and commits before returning, so
each call is atomic for its record and nothing is transactional across
records.
"""

import copy
from typing import Any

from sqlalchemy import delete, insert, select, text
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from schemabase.core.logging import get_logger
from schemabase.domain.exceptions import RecordNotFoundError
from schemabase.infrastructure.persistence.errors import translate_store_errors
from schemabase.infrastructure.persistence.models import DocumentModel
from schemabase.infrastructure.persistence.stores.base import DocumentStore

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class SqlDocumentStore(DocumentStore):
    """DocumentStore implementation over SQLite or PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory for the sessions each operation runs in.
        """
        self.session_factory = session_factory

    @staticmethod
    async def _get_model(
        session: AsyncSession, collection: str, record_id: str
    ) -> DocumentModel | None:
        result = await session.execute(
            select(DocumentModel).where(
                DocumentModel.collection == collection,
                DocumentModel.record_id == record_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_record(self, collection: str, record_id: str, doc: dict[str, Any]) -> None:
        with translate_store_errors("create_record", collection):
            async with self.session_factory() as session:
                existing = await self._get_model(session, collection, record_id)
                if existing is None:
                    session.add(
                        DocumentModel(
                            collection=collection,
                            record_id=record_id,
                            data=copy.deepcopy(doc),
                        )
                    )
                else:
                    existing.data = copy.deepcopy(doc)
                await session.commit()

        logger.debug("Record written", collection=collection, record_id=record_id)

    async def create_record_if_absent(
        self, collection: str, record_id: str, doc: dict[str, Any]
    ) -> bool:
        with translate_store_errors("create_record_if_absent", collection):
            async with self.session_factory() as session:
                values = {
                    "collection": collection,
                    "record_id": record_id,
                    "data": copy.deepcopy(doc),
                }
                dialect = session.bind.dialect.name
                insert_fn = _UPSERT_DIALECTS.get(dialect)

                if insert_fn is not None:
                    stmt = insert_fn(DocumentModel).values(**values).on_conflict_do_nothing(
                        index_elements=["collection", "record_id"]
                    )
                    result = await session.execute(stmt)
                    created = result.rowcount == 1
                else:
                    # No native conditional insert; the unique constraint
                    # still rejects a concurrent duplicate.
                    existing = await self._get_model(session, collection, record_id)
                    created = existing is None
                    if created:
                        await session.execute(insert(DocumentModel).values(**values))

                await session.commit()

        logger.debug(
            "Conditional record write",
            collection=collection,
            record_id=record_id,
            created=created,
        )
        return created

    async def get_record(self, collection: str, record_id: str) -> dict[str, Any] | None:
        with translate_store_errors("get_record", collection):
            async with self.session_factory() as session:
                model = await self._get_model(session, collection, record_id)
                if model is None:
                    return None
                return copy.deepcopy(model.data)

    async def update_record(
        self, collection: str, record_id: str, partial: dict[str, Any]
    ) -> dict[str, Any]:
        with translate_store_errors("update_record", collection):
            async with self.session_factory() as session:
                model = await self._get_model(session, collection, record_id)
                if model is None:
                    raise RecordNotFoundError(collection, record_id)

                merged = {**model.data, **copy.deepcopy(partial)}
                model.data = merged
                await session.commit()

        logger.debug(
            "Record updated",
            collection=collection,
            record_id=record_id,
            fields=sorted(partial),
        )
        return copy.deepcopy(merged)

    async def delete_record(self, collection: str, record_id: str) -> None:
        with translate_store_errors("delete_record", collection):
            async with self.session_factory() as session:
                await session.execute(
                    delete(DocumentModel).where(
                        DocumentModel.collection == collection,
                        DocumentModel.record_id == record_id,
                    )
                )
                await session.commit()

        logger.debug("Record deleted", collection=collection, record_id=record_id)

    async def list_records(self, collection: str) -> list[dict[str, Any]]:
        with translate_store_errors("list_records", collection):
            async with self.session_factory() as session:
                result = await session.execute(
                    select(DocumentModel)
                    .where(DocumentModel.collection == collection)
                    .order_by(DocumentModel.pk)
                )
                models = result.scalars().all()

        return [{"id": model.record_id, **copy.deepcopy(model.data)} for model in models]

    async def check_connection(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Document store connection check failed", error=str(e))
            return False
