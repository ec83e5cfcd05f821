"""Exceptions raised by pgdocstore.

Driver errors (sqlalchemy.exc.DBAPIError and subclasses) are never wrapped;
they reach the caller unmodified.
"""

from dataclasses import dataclass
from typing import Any


class PgDocStoreError(Exception):
    """Base class for all pgdocstore errors."""
    pass


class NotConnectedError(PgDocStoreError):
    """Raised when an operation is attempted outside the connected state."""

    def __init__(self, message: str = "DB_DISCONNECTED"):
        super().__init__(message)


class UnsupportedOperatorError(PgDocStoreError):
    """Raised when a filter or update names an operator outside the fixed set."""

    def __init__(self, operator: str, field: str | None = None):
        self.operator = operator
        self.field = field
        where = f" on field '{field}'" if field is not None else ""
        super().__init__(f"Unsupported operator '{operator}'{where}")


class InvalidQueryError(PgDocStoreError):
    """Raised when a query, projection, sort or update document is malformed."""
    pass


class InvalidSchemaError(PgDocStoreError):
    """Raised when a field schema is malformed."""
    pass


class SchemaTypeError(InvalidSchemaError):
    """Raised when a field schema names a type with no physical column type."""

    def __init__(self, field: str, field_type: Any):
        self.field = field
        self.field_type = field_type
        super().__init__(f"Field '{field}' has unsupported type '{field_type}'")


@dataclass
class InsertOutcome:
    """Result of inserting a single document.

    Attributes:
        index: Position of the document in the input.
        document: The document as supplied by the caller.
        row: The inserted row mapped back to a document, when it succeeded.
        error: The exception raised for this document, when it failed.
    """

    index: int
    document: dict[str, Any]
    row: dict[str, Any] | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PartialInsertError(PgDocStoreError):
    """Raised when at least one document of a multi-document insert failed.

    Outcomes are ordered like the input documents; rows that were inserted
    are available through ``succeeded``.
    """

    def __init__(self, outcomes: list[InsertOutcome]):
        self.outcomes = outcomes
        failed = self.failed
        super().__init__(
            f"{len(failed)} of {len(outcomes)} documents failed to insert: "
            + "; ".join(f"[{o.index}] {o.error}" for o in failed)
        )

    @property
    def succeeded(self) -> list[dict[str, Any]]:
        return [o.row for o in self.outcomes if o.ok and o.row is not None]

    @property
    def failed(self) -> list[InsertOutcome]:
        return [o for o in self.outcomes if not o.ok]
