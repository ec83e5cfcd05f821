"""Pytest configuration for all tests."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from pgdocstore.core.config import Settings
from pgdocstore.infrastructure.persistence import ConnectionState, Connector

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def book_schema() -> dict:
    """Field mapping from the book collection file."""
    return json.loads((FIXTURES / "collection.book.json").read_text())["fields"]


@pytest.fixture
def user_schema() -> dict:
    return json.loads((FIXTURES / "collection.user.json").read_text())["fields"]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="testing",
        db_host="localhost",
        db_name="content",
        db_user="tester",
        db_password="secret",
    )


@pytest.fixture
def connected_connector(settings) -> Connector:
    """A connector in the CONNECTED state whose execute is an AsyncMock.

    Tests set ``connected_connector.execute.side_effect`` to script results.
    """
    connector = Connector(settings)
    connector.state = ConnectionState.CONNECTED
    connector._connection = MagicMock()
    connector.execute = AsyncMock()
    return connector
