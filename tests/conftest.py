"""
Root pytest configuration file for Confluence client tests.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from requests import Session

# Make the shared fixtures package importable from every test directory
sys.path.append(str(Path(__file__).parent))

from fixtures.http_mocks import SERVER  # noqa: E402

from confluence_simple_client.connection import ConfluenceConnection  # noqa: E402


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def mock_session():
    """Return a mocked requests session."""
    return MagicMock(spec=Session)


@pytest.fixture
def connection(mock_session):
    """Return a connection to the test server using the mocked session."""
    return ConfluenceConnection("user", "pass", f"{SERVER}/", session=mock_session)


@pytest.fixture
def query(connection):
    """Return a query bound to the mocked connection."""
    return connection.create_query()
