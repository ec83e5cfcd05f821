"""pgdocstore - document-style CRUD over PostgreSQL.

Mongo-like filters, sort/projection/pagination options and schema-described
documents are compiled to parameterized SQL, and collection tables are kept
in step with their declared field schemas.
"""

__version__ = "0.1.0"

from pgdocstore.application.services import DataStore
from pgdocstore.core.exceptions import (
    InsertOutcome,
    InvalidQueryError,
    InvalidSchemaError,
    NotConnectedError,
    PartialInsertError,
    PgDocStoreError,
    SchemaTypeError,
    UnsupportedOperatorError,
)
from pgdocstore.core.query import CompiledStatement, QueryCompiler, QueryOptions
from pgdocstore.domain.entities import FieldSchema, FieldType
from pgdocstore.infrastructure.persistence import ConnectionState, Connector, SchemaSynchronizer

__all__ = [
    "CompiledStatement",
    "ConnectionState",
    "Connector",
    "DataStore",
    "FieldSchema",
    "FieldType",
    "InsertOutcome",
    "InvalidQueryError",
    "InvalidSchemaError",
    "NotConnectedError",
    "PartialInsertError",
    "PgDocStoreError",
    "QueryCompiler",
    "QueryOptions",
    "SchemaSynchronizer",
    "SchemaTypeError",
    "UnsupportedOperatorError",
    "__version__",
]
