"""
Pytest configuration and shared fixtures for the test suite.

The motor client is replaced by small in-memory doubles: a client whose
``admin.command`` is an AsyncMock, databases and collections created on
first lookup, and a collection that keeps inserted documents in a list.
Like the real driver, collections stop working once their client is closed.
"""

import copy
import pytest
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, Mock

from bson import ObjectId
from pymongo.errors import InvalidOperation

from articles_demo.foundation.config import DatabaseConfig, DemoConfig, DEFAULT_ARTICLE


class InMemoryCursor:
    """Stands in for AsyncIOMotorCursor."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        if length is None:
            return list(self._documents)
        return list(self._documents[:length])


class InMemoryCollection:
    """Stands in for AsyncIOMotorCollection; supports equality filters only."""

    def __init__(self, name: str, client: Any):
        self.name = name
        self.client = client
        self.documents: List[Dict[str, Any]] = []

    def _check_open(self) -> None:
        if self.client.closed:
            raise InvalidOperation("Cannot use MongoClient after close")

    async def insert_one(self, document: Dict[str, Any]):
        self._check_open()
        if not isinstance(document, dict):
            raise TypeError("document must be an instance of dict")
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return Mock(inserted_id=document["_id"], acknowledged=True)

    def find(self, query: Optional[Dict[str, Any]] = None) -> InMemoryCursor:
        self._check_open()
        query = query or {}
        matches = [
            copy.deepcopy(doc) for doc in self.documents
            if all(doc.get(key) == value for key, value in query.items())
        ]
        return InMemoryCursor(matches)


class InMemoryDatabase:
    """Stands in for AsyncIOMotorDatabase."""

    def __init__(self, name: str, client: Any):
        self.name = name
        self.client = client
        self.collections: Dict[str, InMemoryCollection] = {}

    def __getitem__(self, name: str) -> InMemoryCollection:
        if name not in self.collections:
            self.collections[name] = InMemoryCollection(name, self.client)
        return self.collections[name]


def make_mock_client() -> MagicMock:
    """Mock MongoDB client backed by in-memory databases."""
    client = MagicMock()
    databases: Dict[str, InMemoryDatabase] = {}

    def get_database(name):
        if name not in databases:
            databases[name] = InMemoryDatabase(name, client)
        return databases[name]

    def close():
        client.closed = True

    client.__getitem__.side_effect = get_database
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = Mock(side_effect=close)
    client.closed = False
    client.databases = databases
    return client


@pytest.fixture
def mock_client() -> MagicMock:
    return make_mock_client()


@pytest.fixture
def patched_motor(monkeypatch, mock_client):
    """Patch AsyncIOMotorClient so every connect gets ``mock_client``, reopened."""
    def open_client(*args, **kwargs):
        mock_client.closed = False
        return mock_client

    factory = Mock(side_effect=open_client)
    monkeypatch.setattr("articles_demo.infrastructure.database.AsyncIOMotorClient", factory)
    return factory


@pytest.fixture
def db_config() -> DatabaseConfig:
    return DatabaseConfig(
        connection_string="mongodb://localhost:27017",
        username="demo",
        password="D3m0",
        database_name="efc",
        collection_name="articles",
        server_selection_timeout_ms=1000,
    )


@pytest.fixture
def demo_config(db_config) -> DemoConfig:
    return DemoConfig(database=db_config, document=copy.deepcopy(DEFAULT_ARTICLE))


@pytest.fixture
def article_data() -> Dict[str, Any]:
    return {
        "label": "Article A",
        "slug": "article-a",
        "description": "The first article",
        "text": "<div><p>Lorem ipsum</p></div>",
        "tags": ["text", "article", "node"],
    }
