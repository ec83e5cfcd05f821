"""Document-style CRUD over PostgreSQL tables.

DataStore ties the connector, schema synchronizer and query compiler
together: inserts reconcile the table first, finds add pagination metadata,
and every returned row is mapped back to a document.
"""

from collections.abc import Mapping
from typing import Any

from pgdocstore.core.exceptions import InsertOutcome, PartialInsertError
from pgdocstore.core.logging import LoggingContext, get_logger
from pgdocstore.core.pagination import MetadataProvider, build_metadata
from pgdocstore.core.query import QueryCompiler, QueryOptions
from pgdocstore.domain.entities import FieldSchema
from pgdocstore.domain.services import DocumentMapper
from pgdocstore.infrastructure.persistence import ConnectionState, Connector, SchemaSynchronizer

logger = get_logger(__name__)

Schema = FieldSchema | Mapping[str, Any] | None


class DataStore:
    """Insert, find, update and delete documents in collection tables.

    Every operation requires a connected connector and fails immediately
    with NotConnectedError otherwise.

    Example:
        store = DataStore()
        await store.connect()
        await store.insert({"title": "War and Peace"}, "books", schema)
        page = await store.find({"title": "War and Peace"}, "books", schema=schema)
    """

    def __init__(
        self,
        connector: Connector | None = None,
        metadata_provider: MetadataProvider | None = None,
        synchronizer: SchemaSynchronizer | None = None,
    ) -> None:
        self.connector = connector or Connector()
        self.synchronizer = synchronizer or SchemaSynchronizer(self.connector)
        self.metadata_provider = metadata_provider or build_metadata

    @property
    def state(self) -> ConnectionState:
        return self.connector.state

    async def connect(self, **overrides: Any) -> None:
        await self.connector.connect(**overrides)

    async def close(self) -> None:
        await self.connector.close()

    def get_metadata(self, options: QueryOptions | Mapping[str, Any] | None, count: int) -> dict[str, Any]:
        """Pagination metadata for a find, computed by the metadata collaborator."""
        return self.metadata_provider(QueryOptions.from_mapping(options), count)

    async def insert(
        self,
        data: Mapping[str, Any] | list[Mapping[str, Any]],
        collection: str,
        schema: Schema = None,
    ) -> list[dict[str, Any]]:
        """Insert one document or a list of documents.

        The table is reconciled with the schema once, then each document is
        inserted with its own statement, in input order.

        Returns:
            Inserted documents, in input order.

        Raises:
            NotConnectedError: If not connected.
            SchemaTypeError: If the schema names an unsupported type.
            PartialInsertError: If any document failed. Its ``outcomes``
                list holds the inserted row or the error for every input
                document at the same index.
        """
        self.connector.require_connected()

        documents = [data] if isinstance(data, Mapping) else list(data)
        field_schema = FieldSchema.from_mapping(schema)

        with LoggingContext(collection=collection):
            logger.debug("Inserting documents", count=len(documents))
            await self.synchronizer.reconcile(collection, field_schema)

            compiler = QueryCompiler(field_schema)
            mapper = DocumentMapper(field_schema)
            outcomes: list[InsertOutcome] = [
                InsertOutcome(index=i, document=dict(document)) for i, document in enumerate(documents)
            ]

            for outcome in outcomes:
                try:
                    statement = compiler.compile_insert(collection, mapper.to_insert_values(outcome.document))
                    result = await self.connector.execute(statement)
                    outcome.row = mapper.to_document(result.rows[0]) if result.rows else None
                except Exception as e:
                    logger.error("Document insert failed", index=outcome.index, error=str(e))
                    outcome.error = e

            if any(not outcome.ok for outcome in outcomes):
                raise PartialInsertError(outcomes)

            logger.info("Documents inserted", count=len(outcomes))
            return [outcome.row for outcome in outcomes]

    async def find(
        self,
        query: Mapping[str, Any] | None,
        collection: str,
        options: QueryOptions | Mapping[str, Any] | None = None,
        schema: Schema = None,
    ) -> dict[str, Any]:
        """Find documents matching a filter.

        Returns:
            ``{"results": [...], "metadata": {...}}``.
        """
        self.connector.require_connected()
        options = QueryOptions.from_mapping(options)
        compiler = QueryCompiler(schema)

        logger.debug("Finding documents", collection=collection, query=query, options=options.to_dict())

        statement = compiler.compile_find(collection, query, options)
        response = await self.connector.execute(statement)

        count_result = await self.connector.execute(compiler.compile_count(collection, query))
        total = int(count_result.rows[0]["count"]) if count_result.rows else 0

        return {
            "results": DocumentMapper(schema).to_documents(response.rows),
            "metadata": self.get_metadata(options, total),
        }

    async def update(
        self,
        query: Mapping[str, Any] | None,
        collection: str,
        update: Mapping[str, Any],
        schema: Schema = None,
    ) -> dict[str, Any]:
        """Apply ``set``/``inc`` operators to every matching document.

        Returns:
            ``{"results": [...]}`` with the updated documents; empty when
            nothing matched.
        """
        self.connector.require_connected()

        logger.debug("Updating documents", collection=collection, query=query, update=update)

        statement = QueryCompiler(schema).compile_update(collection, query, update)
        response = await self.connector.execute(statement)

        return {"results": DocumentMapper(schema).to_documents(response.rows)}

    async def delete(
        self,
        query: Mapping[str, Any] | None,
        collection: str,
        schema: Schema = None,
    ) -> dict[str, int]:
        """Delete matching documents.

        Returns:
            ``{"deletedCount": n}``.
        """
        self.connector.require_connected()

        logger.debug("Deleting documents", collection=collection, query=query)

        statement = QueryCompiler(schema).compile_delete(collection, query)
        response = await self.connector.execute(statement)

        return {"deletedCount": len(response.rows)}

    async def stats(self, collection: str) -> dict[str, int]:
        """Number of documents in a collection."""
        self.connector.require_connected()
        result = await self.connector.execute(QueryCompiler().compile_count(collection))
        return {"count": int(result.rows[0]["count"]) if result.rows else 0}
