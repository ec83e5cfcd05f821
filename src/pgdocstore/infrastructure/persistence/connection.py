"""Connection state for a single PostgreSQL connection.

The Connector owns exactly one live SQLAlchemy AsyncConnection (asyncpg
driver, AUTOCOMMIT) and a tri-state lifecycle. Every statement is issued
through ``execute`` one at a time, since an asyncpg connection cannot run
overlapping queries.
"""

import asyncio
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from pgdocstore.core.config import Settings, get_settings
from pgdocstore.core.events import ConnectionEvent, EventRegistry
from pgdocstore.core.exceptions import NotConnectedError
from pgdocstore.core.logging import get_logger
from pgdocstore.core.query import CompiledStatement

logger = get_logger(__name__)


class ConnectionState(IntEnum):
    """Lifecycle of a connector."""

    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2


@dataclass
class QueryResult:
    """Rows returned by a statement and the affected row count."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0


class Connector:
    """Owns one database connection and its lifecycle.

    Example:
        connector = Connector()
        connector.events.subscribe("DB_CONNECTED", on_connected)
        await connector.connect()
        result = await connector.execute(CompiledStatement("SELECT 1"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        events: EventRegistry | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.events = events or EventRegistry()
        self.state = ConnectionState.DISCONNECTED
        self._engine: AsyncEngine | None = None
        self._connection: AsyncConnection | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def connection(self) -> AsyncConnection | None:
        return self._connection

    def build_url(self, **overrides: Any) -> URL:
        """Database URL from settings; keyword overrides win.

        Accepted overrides: host, port, database, user, password.
        """
        url = self.settings.database_url
        mapping = {
            "host": "host",
            "port": "port",
            "database": "database",
            "user": "username",
            "password": "password",
        }
        changes = {mapping[k]: v for k, v in overrides.items() if k in mapping and v is not None}
        return url.set(**changes) if changes else url

    async def connect(self, **overrides: Any) -> None:
        """Open the connection and notify DB_CONNECTED observers.

        Connecting an already connected connector does nothing. On failure
        the state returns to DISCONNECTED, DB_ERROR observers are notified
        and the driver error propagates.
        """
        if self.state is ConnectionState.CONNECTED:
            return

        self.state = ConnectionState.CONNECTING
        url = self.build_url(**overrides)
        logger.debug("Connecting", database_url=url.render_as_string(hide_password=True))

        try:
            self._engine = create_async_engine(url, echo=self.settings.db_echo)
            connection = await self._engine.connect()
            self._connection = await connection.execution_options(isolation_level="AUTOCOMMIT")
        except Exception as e:
            self.state = ConnectionState.DISCONNECTED
            if self._engine is not None:
                await self._engine.dispose()
            self._engine = None
            self._connection = None
            logger.error("Database connection failed", error=str(e))
            await self.events.emit(ConnectionEvent.ERROR, e)
            raise

        self.state = ConnectionState.CONNECTED
        logger.info("Database connected", database=url.database, host=url.host)
        await self.events.emit(ConnectionEvent.CONNECTED, self)

    def require_connected(self) -> None:
        """Raise NotConnectedError unless the connector is connected."""
        if self.state is not ConnectionState.CONNECTED or self._connection is None:
            raise NotConnectedError()

    async def execute(self, statement: CompiledStatement) -> QueryResult:
        """Run a compiled statement with its positional parameters.

        Raises:
            NotConnectedError: If not connected.
            sqlalchemy.exc.DBAPIError: Driver errors, unmodified.
        """
        self.require_connected()

        logger.debug("Executing statement", sql=statement.sql, param_count=len(statement.params))

        async with self._lock:
            result = await self._connection.exec_driver_sql(statement.sql, statement.params)
            if result.returns_rows:
                rows = [dict(row._mapping) for row in result.fetchall()]
                return QueryResult(rows=rows, rowcount=len(rows))
            return QueryResult(rowcount=result.rowcount)

    async def close(self) -> None:
        """Close the connection and dispose of the engine."""
        if self._connection is not None:
            await self._connection.close()
        if self._engine is not None:
            await self._engine.dispose()

        was_connected = self.state is ConnectionState.CONNECTED
        self._connection = None
        self._engine = None
        self.state = ConnectionState.DISCONNECTED

        if was_connected:
            logger.info("Database connection closed")
            await self.events.emit(ConnectionEvent.DISCONNECTED, self)
