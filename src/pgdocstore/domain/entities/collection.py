"""Field schema entities for collections.

A collection is a table name plus an ordered field schema supplied by the
caller on every call. The schema is never persisted by this library.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Supported field types for collection schemas."""

    STRING = "String"
    NUMBER = "Number"
    DATETIME = "DateTime"
    MIXED = "Mixed"
    OBJECT = "Object"
    REFERENCE = "Reference"


# Bookkeeping columns present on every managed table
INTERNAL_FIELDS = (
    "_id",
    "_apiVersion",
    "_version",
    "_history",
    "_createdAt",
    "_createdBy",
    "_lastModifiedBy",
    "_lastModifiedAt",
)

TIMESTAMP_INTERNAL_FIELDS = frozenset({"_createdAt", "_lastModifiedAt"})

JSON_FIELD_TYPES = frozenset({FieldType.MIXED, FieldType.OBJECT})

# Keys starting with this prefix hold resolved references and are never written
REFERENCE_PREFIX = "_ref"


def is_reference_key(key: str) -> bool:
    return key.startswith(REFERENCE_PREFIX)


@dataclass(frozen=True)
class FieldDefinition:
    """A single declared field.

    Attributes:
        name: Field (and column) name.
        type: Declared type name as given by the caller.
        required: Whether the column is created NOT NULL.
    """

    name: str
    type: str
    required: bool = False

    @property
    def field_type(self) -> FieldType | None:
        """The declared type as a FieldType, or None when it is not supported."""
        try:
            return FieldType(self.type)
        except ValueError:
            return None


@dataclass(frozen=True)
class FieldSchema:
    """Ordered mapping from field name to its definition."""

    fields: tuple[FieldDefinition, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, schema: "Mapping[str, Any] | FieldSchema | None") -> "FieldSchema":
        """Build a schema from ``{name: {"type": ..., "required": ...}}``.

        A mapping with a top-level ``fields`` key (a collection file) is
        unwrapped first.
        """
        if schema is None:
            return cls()
        if isinstance(schema, FieldSchema):
            return schema
        if "fields" in schema and isinstance(schema["fields"], Mapping):
            schema = schema["fields"]

        definitions = []
        for name, attrs in schema.items():
            attrs = attrs or {}
            definitions.append(
                FieldDefinition(
                    name=name,
                    type=attrs.get("type", ""),
                    required=bool(attrs.get("required", False)),
                )
            )
        return cls(tuple(definitions))

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    def get(self, name: str) -> FieldDefinition | None:
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None

    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def user_fields(self) -> list[FieldDefinition]:
        """Declared fields excluding the reserved internal ones."""
        return [f for f in self.fields if f.name not in INTERNAL_FIELDS]
