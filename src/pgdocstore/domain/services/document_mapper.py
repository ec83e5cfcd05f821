"""Mapping between documents and table rows."""

import uuid
from collections.abc import Callable, Mapping
from typing import Any

from pgdocstore.core.logging import get_logger
from pgdocstore.core.query.values import decode_json, to_timestamp
from pgdocstore.domain.entities import (
    INTERNAL_FIELDS,
    JSON_FIELD_TYPES,
    TIMESTAMP_INTERNAL_FIELDS,
    FieldSchema,
    is_reference_key,
)

logger = get_logger(__name__)


def generate_id() -> str:
    return str(uuid.uuid4())


class DocumentMapper:
    """Converts documents to insertable column values and rows back to documents."""

    def __init__(
        self,
        schema: FieldSchema | Mapping[str, Any] | None,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self.schema = FieldSchema.from_mapping(schema)
        self.id_factory = id_factory
        self._json_columns = {"_history"} | {
            f.name for f in self.schema.user_fields() if f.field_type in JSON_FIELD_TYPES
        }

    def coerce_internal(self, key: str, value: Any) -> Any:
        if key in TIMESTAMP_INTERNAL_FIELDS:
            return to_timestamp(value)
        if key == "_history":
            return []
        return value

    def to_insert_values(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """Column values for one INSERT, in document order with ``_id`` last.

        Reference keys are dropped. Keys that are neither internal nor
        declared in the schema have no column and are dropped with a warning.
        Declared fields are left as given; the compiler encodes them.
        """
        values: dict[str, Any] = {}
        ignored = []

        for key, value in document.items():
            if key == "_id" or is_reference_key(key):
                continue
            if key in INTERNAL_FIELDS:
                values[key] = self.coerce_internal(key, value)
            elif key in self.schema:
                if value is not None:
                    values[key] = value
            else:
                ignored.append(key)

        if ignored:
            logger.warning("Ignoring fields not declared in schema", fields=ignored)

        values["_id"] = str(document["_id"]) if document.get("_id") else self.id_factory()
        return values

    def to_document(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Map a returned row back to a document."""
        document = dict(row)
        if document.get("_id") is not None and not isinstance(document["_id"], str):
            document["_id"] = str(document["_id"])
        for column in self._json_columns:
            if column in document:
                document[column] = decode_json(document[column])
        return document

    def to_documents(self, rows: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
        return [self.to_document(row) for row in rows]
