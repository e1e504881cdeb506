"""Record-level constants and reference-stub helpers.

Records are plain mappings. The data service owns the derived keys below;
callers never set them.
"""

from typing import Any

RECORD_ID_FIELD = "uuid"
CREATED_AT_FIELD = "createdAt"
UPDATED_AT_FIELD = "lastUpdatedAt"
SCHEMA_ID_FIELD = "_schemaId"
REF_FLAG_FIELD = "_ref"

DERIVED_FIELDS = frozenset(
    {RECORD_ID_FIELD, CREATED_AT_FIELD, UPDATED_AT_FIELD, SCHEMA_ID_FIELD}
)

# Fixed id of the bootstrap record written into every initialized collection
METADATA_RECORD_ID = "_metadata"


def make_reference_stub(record_id: Any) -> dict[str, Any]:
    """Build the persisted form of a reference to another record."""
    return {RECORD_ID_FIELD: record_id, REF_FLAG_FIELD: True}
