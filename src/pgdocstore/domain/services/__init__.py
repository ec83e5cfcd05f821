"""Domain services for pgdocstore.

Services here have no dependencies on the database connection.
"""

from pgdocstore.domain.services.document_mapper import DocumentMapper, generate_id
from pgdocstore.domain.services.schema_validator import (
    SchemaValidationError,
    SchemaValidator,
)

__all__ = [
    "DocumentMapper",
    "SchemaValidationError",
    "SchemaValidator",
    "generate_id",
]
