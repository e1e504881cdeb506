"""Infrastructure layer - External dependencies and implementations.

This layer contains all external dependencies including:
- Database adapters (SQLAlchemy)
- Document store adapters
- API routes (FastAPI)

The infrastructure layer implements interfaces used by the domain services.
"""

from schemabase.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "init_database",
]
