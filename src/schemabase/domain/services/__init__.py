"""Domain services for SchemaBase.

Services contain business logic that doesn't naturally fit within a single entity.
"""

from schemabase.domain.services.data_service import DataService
from schemabase.domain.services.definition_validator import (
    DefinitionValidationError,
    DefinitionValidator,
)
from schemabase.domain.services.relationship_resolver import (
    Relationship,
    resolve_relationships,
)
from schemabase.domain.services.schema_registry import SchemaRegistry
from schemabase.domain.services.structural_validator import (
    CompiledValidator,
    StructuralValidatorFactory,
    ValidationOutcome,
)

__all__ = [
    "CompiledValidator",
    "DataService",
    "DefinitionValidationError",
    "DefinitionValidator",
    "Relationship",
    "SchemaRegistry",
    "StructuralValidatorFactory",
    "ValidationOutcome",
    "resolve_relationships",
]
