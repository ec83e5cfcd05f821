"""Domain entities for pgdocstore."""

from pgdocstore.domain.entities.collection import (
    INTERNAL_FIELDS,
    JSON_FIELD_TYPES,
    REFERENCE_PREFIX,
    TIMESTAMP_INTERNAL_FIELDS,
    FieldDefinition,
    FieldSchema,
    FieldType,
    is_reference_key,
)

__all__ = [
    "FieldDefinition",
    "FieldSchema",
    "FieldType",
    "INTERNAL_FIELDS",
    "JSON_FIELD_TYPES",
    "REFERENCE_PREFIX",
    "TIMESTAMP_INTERNAL_FIELDS",
    "is_reference_key",
]
