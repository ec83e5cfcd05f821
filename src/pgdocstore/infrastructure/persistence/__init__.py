"""Database access: connection state and schema synchronization."""

from pgdocstore.infrastructure.persistence.connection import (
    ConnectionState,
    Connector,
    QueryResult,
)
from pgdocstore.infrastructure.persistence.schema_sync import (
    FIELD_TYPE_TO_SQL,
    SYSTEM_COLUMNS,
    SchemaSynchronizer,
)

__all__ = [
    "ConnectionState",
    "Connector",
    "FIELD_TYPE_TO_SQL",
    "QueryResult",
    "SYSTEM_COLUMNS",
    "SchemaSynchronizer",
]
