"""Application services."""

from pgdocstore.application.services.data_store import DataStore

__all__ = ["DataStore"]
