"""Infrastructure layer - the PostgreSQL connection and DDL.

The infrastructure layer owns everything that talks to the database
driver: connection state and schema synchronization.
"""

from pgdocstore.infrastructure.persistence import (
    ConnectionState,
    Connector,
    SchemaSynchronizer,
)

__all__ = [
    "ConnectionState",
    "Connector",
    "SchemaSynchronizer",
]
