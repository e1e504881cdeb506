"""Repository for schema operations.

Provides CRUD operations for the schemas table.
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schemabase.infrastructure.persistence.models import SchemaModel


class SchemaRepository:
    """Repository for schema database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, schema: SchemaModel) -> SchemaModel:
        """Create a new schema.

        Args:
            schema: The schema model to create.

        Returns:
            The created schema model.
        """
        self.session.add(schema)
        await self.session.flush()
        return schema

    async def get_by_id(self, schema_id: str) -> SchemaModel | None:
        """Get a schema by ID.

        Args:
            schema_id: The schema ID.

        Returns:
            The schema model if found, None otherwise.
        """
        result = await self.session.execute(
            select(SchemaModel).where(SchemaModel.id == schema_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[SchemaModel]:
        """List every schema, oldest first."""
        result = await self.session.execute(
            select(SchemaModel).order_by(SchemaModel.created_at)
        )
        return list(result.scalars().all())

    async def update(self, schema: SchemaModel) -> SchemaModel:
        """Flush pending changes on a schema model."""
        await self.session.flush()
        return schema

    async def update_table_ref(
        self, schema_id: str, table_ref: str, updated_at: datetime
    ) -> int:
        """Set a schema's table reference and mark its table initialized.

        Returns:
            Number of rows updated.
        """
        result = await self.session.execute(
            update(SchemaModel)
            .where(SchemaModel.id == schema_id)
            .values(
                table_ref=table_ref,
                is_table_initialized=True,
                last_updated_at=updated_at,
            )
        )
        return result.rowcount

    async def delete_by_id(self, schema_id: str) -> int:
        """Delete a schema by ID.

        Returns:
            Number of rows deleted.
        """
        result = await self.session.execute(
            delete(SchemaModel).where(SchemaModel.id == schema_id)
        )
        return result.rowcount
