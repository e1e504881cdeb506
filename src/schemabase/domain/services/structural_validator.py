"""Structural validation of records against schema definitions.

Compiles a schema definition into a jsonschema Draft 2020-12 validator and
reports every violation as a human-readable string. The relationship marker
``schemaId`` is not a JSON Schema keyword and is ignored by the validator.
"""

from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from schemabase.domain.entities.schema import SchemaDefinition


@dataclass
class ValidationOutcome:
    """Result of checking one record."""

    ok: bool
    violations: list[str] = field(default_factory=list)


def _format_error(error: ValidationError) -> str:
    path = "$"
    for part in error.absolute_path:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return f"{path}: {error.message}"


class CompiledValidator:
    """A validator bound to one schema definition."""

    def __init__(self, json_schema: dict[str, Any]) -> None:
        self.json_schema = json_schema
        self._validator = Draft202012Validator(json_schema)

    def check(self, document: Any) -> ValidationOutcome:
        """Check a record and collect all violations.

        Args:
            document: The record to check.

        Returns:
            ValidationOutcome with ok=False and the sorted violation list
            when the record does not conform.
        """
        errors = sorted(
            self._validator.iter_errors(document),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
        violations = [_format_error(e) for e in errors]
        return ValidationOutcome(ok=not violations, violations=violations)


class StructuralValidatorFactory:
    """Compiles schema definitions into validators."""

    def compile(self, definition: SchemaDefinition) -> CompiledValidator:
        """Compile a definition.

        ``properties``, ``required`` and ``additionalProperties`` are used
        as declared; an undeclared ``additionalProperties`` is permissive.
        """
        return CompiledValidator(definition.to_json_schema())
