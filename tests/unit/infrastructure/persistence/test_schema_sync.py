"""Unit tests for SchemaSynchronizer."""
import asyncio
import re

import pytest

from pgdocstore.core.exceptions import NotConnectedError, SchemaTypeError
from pgdocstore.domain.entities import FieldSchema
from pgdocstore.infrastructure.persistence import Connector, QueryResult
from pgdocstore.infrastructure.persistence.schema_sync import (
    SYSTEM_COLUMNS,
    SchemaSynchronizer,
    build_column_def,
)


class FakeCatalog:
    """Answers catalog lookups and records DDL for one table."""

    def __init__(self, exists=False, columns=()):
        self.exists = exists
        self.columns = set(columns)
        self.ddl = []

    async def execute(self, statement):
        await asyncio.sleep(0)
        if "pg_catalog" in statement.sql:
            return QueryResult(rows=[{"table_exists": self.exists}], rowcount=1)
        if "information_schema" in statement.sql:
            return QueryResult(rows=[{"column_name": c} for c in sorted(self.columns)])
        self.ddl.append(statement.sql)
        if statement.sql.startswith("CREATE TABLE"):
            self.exists = True
            self.columns.update(re.findall(r'^\s*"([^"]+)"', statement.sql, re.M))
        return QueryResult()


def test_build_column_def(book_schema):
    schema = FieldSchema.from_mapping(book_schema)

    assert build_column_def(schema.get("title")) == '"title" VARCHAR(255) NOT NULL'
    assert build_column_def(schema.get("edition")) == '"edition" INTEGER NULL'
    assert build_column_def(schema.get("details")) == '"details" JSON NULL'


def test_build_create_table_ddl(connected_connector, user_schema):
    synchronizer = SchemaSynchronizer(connected_connector)

    ddl = synchronizer.build_create_table_ddl("user", FieldSchema.from_mapping(user_schema))

    assert ddl.startswith('CREATE TABLE IF NOT EXISTS "user" (')
    assert '"_id" UUID PRIMARY KEY NOT NULL DEFAULT gen_random_uuid()' in ddl
    assert '"name" VARCHAR(255) NOT NULL' in ddl
    assert '"lastLogin" TIMESTAMP NULL' in ddl
    assert ddl.index('"_lastModifiedBy"') < ddl.index('"name"')


@pytest.mark.asyncio
async def test_reconcile_creates_missing_table(connected_connector, book_schema):
    catalog = FakeCatalog(exists=False)
    connected_connector.execute.side_effect = catalog.execute
    synchronizer = SchemaSynchronizer(connected_connector)

    created = await synchronizer.reconcile("book", FieldSchema.from_mapping(book_schema))

    assert len(catalog.ddl) == 1
    assert catalog.ddl[0].startswith('CREATE TABLE IF NOT EXISTS "book"')
    assert created[: len(SYSTEM_COLUMNS)] == [name for name, _ in SYSTEM_COLUMNS]
    assert created[len(SYSTEM_COLUMNS):] == list(book_schema)


@pytest.mark.asyncio
async def test_reconcile_adds_only_missing_columns(connected_connector, book_schema):
    catalog = FakeCatalog(exists=True, columns=["_id", "title", "datePublished", "authorId", "edition"])
    connected_connector.execute.side_effect = catalog.execute
    synchronizer = SchemaSynchronizer(connected_connector)

    added = await synchronizer.reconcile("book", FieldSchema.from_mapping(book_schema))

    assert added == ["reviews", "details"]
    assert catalog.ddl == [
        'ALTER TABLE "book" ADD COLUMN IF NOT EXISTS "reviews" INTEGER NULL',
        'ALTER TABLE "book" ADD COLUMN IF NOT EXISTS "details" JSON NULL',
    ]


@pytest.mark.asyncio
async def test_reconcile_up_to_date_table_issues_no_ddl(connected_connector, book_schema):
    catalog = FakeCatalog(exists=True, columns=list(book_schema))
    connected_connector.execute.side_effect = catalog.execute
    synchronizer = SchemaSynchronizer(connected_connector)

    assert await synchronizer.reconcile("book", book_schema) == []
    assert catalog.ddl == []


@pytest.mark.asyncio
async def test_reconcile_looks_up_configured_schema(connected_connector, book_schema):
    catalog = FakeCatalog(exists=True, columns=list(book_schema))
    connected_connector.execute.side_effect = catalog.execute
    synchronizer = SchemaSynchronizer(connected_connector, db_schema="content")

    await synchronizer.reconcile("book", book_schema)

    lookup = connected_connector.execute.await_args_list[0].args[0]
    assert lookup.params == ("content", "book")


@pytest.mark.asyncio
async def test_unsupported_type_raises_before_ddl(connected_connector):
    catalog = FakeCatalog(exists=False)
    connected_connector.execute.side_effect = catalog.execute
    synchronizer = SchemaSynchronizer(connected_connector)

    with pytest.raises(SchemaTypeError):
        await synchronizer.reconcile("book", {"tags": {"type": "Array"}})

    connected_connector.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_concurrent_reconcile_creates_once(connected_connector, book_schema):
    catalog = FakeCatalog(exists=False)
    connected_connector.execute.side_effect = catalog.execute
    synchronizer = SchemaSynchronizer(connected_connector)
    schema = FieldSchema.from_mapping(book_schema)

    results = await asyncio.gather(
        synchronizer.reconcile("book", schema),
        synchronizer.reconcile("book", schema),
    )

    creates = [sql for sql in catalog.ddl if sql.startswith("CREATE TABLE")]
    assert len(creates) == 1
    assert sorted(len(r) for r in results)[0] == 0


@pytest.mark.asyncio
async def test_reconcile_requires_connection(settings, book_schema):
    synchronizer = SchemaSynchronizer(Connector(settings))

    with pytest.raises(NotConnectedError):
        await synchronizer.reconcile("book", book_schema)
