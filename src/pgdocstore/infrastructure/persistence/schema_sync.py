"""Schema synchronizer for collection tables.

Makes a table's columns a superset of a declared field schema. Tables are
created on first use; later schemas only ever add columns. Nothing is
altered or dropped.
"""

import asyncio

from pgdocstore.core.exceptions import SchemaTypeError
from pgdocstore.core.logging import get_logger
from pgdocstore.core.query import CompiledStatement, quote_identifier
from pgdocstore.domain.entities import FieldDefinition, FieldSchema, FieldType
from pgdocstore.domain.services import SchemaValidator
from pgdocstore.infrastructure.persistence.connection import Connector

logger = get_logger(__name__)


# SQL type mapping for each field type
FIELD_TYPE_TO_SQL = {
    FieldType.DATETIME: "TIMESTAMP",
    FieldType.MIXED: "JSON",
    FieldType.OBJECT: "JSON",
    FieldType.NUMBER: "INTEGER",
    FieldType.REFERENCE: "VARCHAR(255)",
    FieldType.STRING: "VARCHAR(255)",
}

# Internal columns present on every collection table
SYSTEM_COLUMNS = [
    ("_id", "UUID PRIMARY KEY NOT NULL DEFAULT gen_random_uuid()"),
    ("_apiVersion", "VARCHAR(50) NULL"),
    ("_version", "INTEGER NULL"),
    ("_history", "JSON NULL"),
    ("_createdAt", "TIMESTAMP NULL"),
    ("_createdBy", "VARCHAR(255) NULL"),
    ("_lastModifiedAt", "TIMESTAMP NULL"),
    ("_lastModifiedBy", "VARCHAR(255) NULL"),
]

TABLE_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1
        FROM pg_catalog.pg_class c
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = $1
        AND c.relname = $2
        AND c.relkind = 'r'
    ) AS table_exists
"""

COLUMN_NAMES_SQL = """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_schema = $1 AND table_name = $2
"""


def column_type(definition: FieldDefinition) -> str:
    """Physical column type for a field.

    Raises:
        SchemaTypeError: If the field type has no mapping.
    """
    field_type = definition.field_type
    if field_type is None:
        raise SchemaTypeError(definition.name, definition.type)
    return FIELD_TYPE_TO_SQL[field_type]


def build_column_def(definition: FieldDefinition) -> str:
    nullability = "NOT NULL" if definition.required else "NULL"
    return f"{quote_identifier(definition.name)} {column_type(definition)} {nullability}"


class SchemaSynchronizer:
    """Creates and widens collection tables.

    Reconciliation of one table is serialized by a per-table lock, and the
    DDL uses IF NOT EXISTS, so concurrent first writes cannot both create.
    """

    def __init__(self, connector: Connector, db_schema: str | None = None) -> None:
        self.connector = connector
        self.db_schema = db_schema or connector.settings.db_schema
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, table_name: str) -> asyncio.Lock:
        if table_name not in self._locks:
            self._locks[table_name] = asyncio.Lock()
        return self._locks[table_name]

    def build_create_table_ddl(self, table_name: str, schema: FieldSchema) -> str:
        """Build the CREATE TABLE statement: internal columns, then declared ones."""
        column_defs = [f"{quote_identifier(name)} {col_type}" for name, col_type in SYSTEM_COLUMNS]
        column_defs += [build_column_def(f) for f in schema.user_fields()]
        columns_sql = ",\n  ".join(column_defs)
        return f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} (\n  {columns_sql}\n)"

    def build_add_column_ddl(self, table_name: str, fields: list[FieldDefinition]) -> list[str]:
        return [
            f"ALTER TABLE {quote_identifier(table_name)} ADD COLUMN IF NOT EXISTS {build_column_def(f)}"
            for f in fields
        ]

    async def table_exists(self, table_name: str) -> bool:
        result = await self.connector.execute(
            CompiledStatement(TABLE_EXISTS_SQL, (self.db_schema, table_name))
        )
        return bool(result.rows and result.rows[0]["table_exists"])

    async def existing_columns(self, table_name: str) -> set[str]:
        result = await self.connector.execute(
            CompiledStatement(COLUMN_NAMES_SQL, (self.db_schema, table_name))
        )
        return {row["column_name"] for row in result.rows}

    async def reconcile(self, table_name: str, schema: FieldSchema) -> list[str]:
        """Ensure the table exists with at least the declared columns.

        Args:
            table_name: The collection name.
            schema: The declared field schema.

        Returns:
            Names of the columns created by this call.

        Raises:
            SchemaTypeError: If a field type has no column mapping. Raised
                before any DDL is issued.
            NotConnectedError: If the connector is not connected.
        """
        self.connector.require_connected()
        schema = FieldSchema.from_mapping(schema)
        SchemaValidator.ensure_valid(schema)

        async with self._lock_for(table_name):
            if not await self.table_exists(table_name):
                ddl = self.build_create_table_ddl(table_name, schema)
                await self.connector.execute(CompiledStatement(ddl))
                created = [name for name, _ in SYSTEM_COLUMNS] + [f.name for f in schema.user_fields()]
                logger.info("Collection table created", table_name=table_name, column_count=len(created))
                return created

            existing = await self.existing_columns(table_name)
            missing = [f for f in schema.user_fields() if f.name not in existing]
            if not missing:
                return []

            for ddl in self.build_add_column_ddl(table_name, missing):
                await self.connector.execute(CompiledStatement(ddl))
                logger.debug("Column added", table_name=table_name, ddl=ddl)

            logger.info(
                "Columns added to collection table",
                table_name=table_name,
                fields=[f.name for f in missing],
            )
            return [f.name for f in missing]
