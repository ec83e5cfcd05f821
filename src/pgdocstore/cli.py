"""Command-line interface for pgdocstore.

Small operational commands: check the connection, reconcile a collection
table from a collection file, and show the SQL a query compiles to.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from pgdocstore.core.config import get_settings
from pgdocstore.core.exceptions import PgDocStoreError
from pgdocstore.core.logging import configure_logging, get_logger
from pgdocstore.core.query import QueryCompiler
from pgdocstore.domain.entities import FieldSchema
from pgdocstore.infrastructure.persistence import Connector, SchemaSynchronizer


def _load_json(value: str, what: str) -> Any:
    try:
        return json.loads(value)
    except ValueError as e:
        raise click.BadParameter(f"{what} is not valid JSON: {e}") from e


@click.group()
@click.version_option(version="0.1.0", prog_name="pgdocstore")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides PGDOCSTORE_LOG_LEVEL)",
)
def cli(log_level: str | None) -> None:
    """pgdocstore - document-style CRUD over PostgreSQL."""
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)


@cli.command()
def check() -> None:
    """Check that the configured database is reachable."""
    settings = get_settings()

    async def _check() -> None:
        connector = Connector(settings)
        try:
            await connector.connect()
        finally:
            await connector.close()

    try:
        asyncio.run(_check())
    except Exception as e:
        click.echo(f"Error: could not connect to {settings.db_host}:{settings.db_port}: {e}", err=True)
        sys.exit(1)

    click.echo(f"Connected to {settings.db_name} at {settings.db_host}:{settings.db_port}")


@cli.command()
@click.argument("collection")
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def sync(collection: str, schema_file: Path) -> None:
    """Create or widen COLLECTION's table from SCHEMA_FILE.

    SCHEMA_FILE is a collection JSON file with a "fields" mapping, or a bare
    mapping of field name to {"type", "required"}.
    """
    logger = get_logger(__name__)
    schema = FieldSchema.from_mapping(_load_json(schema_file.read_text(encoding="utf-8"), "schema file"))

    async def _sync() -> list[str]:
        connector = Connector()
        await connector.connect()
        try:
            return await SchemaSynchronizer(connector).reconcile(collection, schema)
        finally:
            await connector.close()

    try:
        added = asyncio.run(_sync())
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    logger.info("Schema synchronized", collection=collection, added=added)
    if added:
        click.echo(f"Added columns to {collection}: {', '.join(added)}")
    else:
        click.echo(f"{collection} is up to date")


@cli.command(name="compile")
@click.argument("collection")
@click.argument("query", default="{}")
@click.option("--sort", default=None, help='Sort as JSON, e.g. {"title": 1}')
@click.option("--fields", default=None, help='Projection as JSON, e.g. {"title": 1}')
@click.option("--limit", type=int, default=None)
@click.option("--skip", type=int, default=None)
def compile_query(
    collection: str,
    query: str,
    sort: str | None,
    fields: str | None,
    limit: int | None,
    skip: int | None,
) -> None:
    """Print the SELECT that QUERY compiles to, without connecting."""
    options = {
        "sort": _load_json(sort, "--sort") if sort else None,
        "fields": _load_json(fields, "--fields") if fields else None,
        "limit": limit,
        "skip": skip,
    }

    try:
        statement = QueryCompiler().compile_find(collection, _load_json(query, "query"), options)
    except PgDocStoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(statement.sql)
    click.echo(json.dumps(list(statement.params), default=str))


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `pgdocstore` command is run
    or when using `python -m pgdocstore`.
    """
    cli()


if __name__ == "__main__":
    main()
