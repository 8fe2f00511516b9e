"""MongoDB access: connect, select, insert, find and disconnect.

The module-level coroutines are the individual steps of the demo; each one is
a thin pass-through to motor that logs the operation and wraps driver errors
in the demo's error taxonomy. :class:`DatabaseManager` bundles them around a
:class:`DatabaseConfig` for callers that prefer an object.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Mapping, Type, TypeVar, Union, AsyncIterator

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from pydantic import BaseModel, ConfigDict, Field
from pymongo.errors import PyMongoError

from articles_demo.core.exceptions import DatabaseConnectionError, WriteError, ReadError, DisconnectError
from articles_demo.foundation.config import DatabaseConfig
from articles_demo.foundation.logging import get_logger, LogContext
from articles_demo.foundation.types import ConnectionState, DemoStep

T = TypeVar('T', bound='MongoDocument')

Document = Union[Mapping[str, Any], "MongoDocument"]

logger = get_logger(__name__, LogContext(component="mongodb"))


class MongoDocument(BaseModel):
    """Base class for documents stored in MongoDB."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )

    id: Optional[str] = Field(default=None, alias="_id")

    def model_dump_mongo(self) -> Dict[str, Any]:
        """Convert to a MongoDB-compatible dictionary.

        ``_id`` is left out while unset so the server assigns one.
        """
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_mongo(cls: Type[T], data: Mapping[str, Any]) -> T:
        """Create instance from MongoDB document."""
        data = dict(data)
        if "_id" in data:
            data["_id"] = str(data["_id"])
        return cls.model_validate(data)


@dataclass
class InsertAck:
    """Acknowledgment of a single-document insert."""
    inserted_id: str
    inserted_count: int = 1
    acknowledged: bool = True


class MongoConnection:
    """Handle on an authenticated session to a MongoDB deployment."""

    def __init__(self, client: AsyncIOMotorClient, uri: str):
        self.client = client
        self.uri = uri
        self.state = ConnectionState.CONNECTED

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def __repr__(self) -> str:
        return f"MongoConnection(uri={redact_uri(self.uri)!r}, state={self.state.value})"


def redact_uri(uri: str) -> str:
    """Hide credentials embedded in a connection string."""
    scheme, sep, rest = uri.partition("://")
    if not sep or "@" not in rest.split("/", 1)[0]:
        return uri
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


async def connect_mongodb(uri: str,
                          user: Optional[str] = None,
                          password: Optional[str] = None,
                          server_selection_timeout_ms: int = 30000) -> MongoConnection:
    """Open an authenticated session and return its handle.

    A ``ping`` is issued straight away; motor connects lazily, and without it
    an unreachable host or bad credentials would only show up on the first
    write.
    """
    op_logger = logger.start_operation("connect", step=DemoStep.CONNECT,
                                       uri=redact_uri(uri))
    client = None
    credentials: Dict[str, Any] = {}
    if user is not None:
        credentials["username"] = user
    if password is not None:
        credentials["password"] = password

    try:
        client = AsyncIOMotorClient(
            uri,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
            **credentials
        )
        await client.admin.command('ping')
    except (PyMongoError, ValueError, TypeError) as e:
        op_logger.fail("Failed to connect to MongoDB", exception=e)
        if client is not None:
            client.close()
        raise DatabaseConnectionError("Failed to connect to MongoDB", uri=redact_uri(uri), cause=e) from e

    op_logger.complete("Connection to MongoDB established")
    return MongoConnection(client, uri)


def _require_connected(connection: MongoConnection) -> None:
    if not connection.is_connected:
        raise RuntimeError(f"Connection is {connection.state.value}; connect before using it")


def select_database(connection: MongoConnection, database_name: str) -> AsyncIOMotorDatabase:
    """Resolve a database by name. No I/O; missing databases appear on first write."""
    _require_connected(connection)
    return connection.client[database_name]


def select_collection(database: AsyncIOMotorDatabase, collection_name: str) -> AsyncIOMotorCollection:
    """Resolve a collection by name. No I/O; missing collections appear on first write."""
    return database[collection_name]


async def insert_document(collection: AsyncIOMotorCollection, document: Document) -> InsertAck:
    """Insert one document and return the write acknowledgment.

    Mappings are copied first so the caller's object does not pick up the
    ``_id`` the driver adds. A :class:`MongoDocument` gets its ``id`` set from
    the acknowledgment.
    """
    if isinstance(document, MongoDocument):
        data = document.model_dump_mongo()
    else:
        data = dict(document)

    op_logger = logger.start_operation("insert_document", step=DemoStep.INSERT,
                                       collection=collection.name)
    try:
        result = await collection.insert_one(data)
    except (PyMongoError, BSONError, TypeError) as e:
        op_logger.fail("Failed to insert document", exception=e)
        raise WriteError("Failed to insert document", collection=collection.name, cause=e) from e

    ack = InsertAck(inserted_id=str(result.inserted_id),
                    acknowledged=bool(result.acknowledged))
    if isinstance(document, MongoDocument):
        document.id = ack.inserted_id

    op_logger.complete("Document inserted successfully", inserted_id=ack.inserted_id)
    return ack


async def find_documents(collection: AsyncIOMotorCollection,
                         query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """Return every document matching ``query``; no query matches everything.

    The whole result set is loaded into memory, in server order.
    """
    query = dict(query or {})
    op_logger = logger.start_operation("find_documents", step=DemoStep.FIND,
                                       collection=collection.name, query=query)
    try:
        cursor = collection.find(query)
        documents = await cursor.to_list(length=None)
    except (PyMongoError, BSONError, TypeError) as e:
        op_logger.fail("Failed to find documents", exception=e)
        raise ReadError("Failed to find documents", collection=collection.name, cause=e) from e

    op_logger.complete("Documents retrieved", document_count=len(documents))
    return documents


async def disconnect_mongodb(connection: MongoConnection) -> bool:
    """Close the session. Closing a handle that is not open raises DisconnectError."""
    if not connection.is_connected:
        raise DisconnectError(f"Cannot disconnect: connection is {connection.state.value}")

    op_logger = logger.start_operation("disconnect", step=DemoStep.DISCONNECT)
    try:
        connection.client.close()
    except PyMongoError as e:
        op_logger.fail("Failed to disconnect from MongoDB", exception=e)
        raise DisconnectError("Failed to disconnect from MongoDB", cause=e) from e
    finally:
        connection.state = ConnectionState.DISCONNECTED

    op_logger.complete("Disconnected from MongoDB")
    return True


class DatabaseManager:
    """One connection, one database and its collections, driven by a DatabaseConfig."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.connection: Optional[MongoConnection] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.logger = get_logger(__name__, LogContext(component="DatabaseManager"))
        self._collections: Dict[str, AsyncIOMotorCollection] = {}

    @property
    def state(self) -> ConnectionState:
        if self.connection is None:
            return ConnectionState.UNCONNECTED
        return self.connection.state

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    async def connect(self) -> MongoConnection:
        """Connect to MongoDB and select the configured database."""
        if self.is_connected:
            return self.connection

        self.connection = await connect_mongodb(
            self.config.connection_string,
            self.config.username,
            self.config.password,
            server_selection_timeout_ms=self.config.server_selection_timeout_ms,
        )
        self.database = select_database(self.connection, self.config.database_name)
        self._collections = {}
        self.logger.info("Database selected", database=self.config.database_name)
        return self.connection

    async def disconnect(self) -> bool:
        """Disconnect from MongoDB; raises DisconnectError if not connected."""
        if self.connection is None:
            raise DisconnectError("Cannot disconnect: never connected")
        try:
            return await disconnect_mongodb(self.connection)
        finally:
            self.database = None
            self._collections = {}

    def get_database(self) -> AsyncIOMotorDatabase:
        if not self.is_connected or self.database is None:
            raise RuntimeError("Database not connected")
        return self.database

    def get_collection(self, name: Optional[str] = None) -> AsyncIOMotorCollection:
        """Get a collection (the configured one by default) with caching."""
        collection_name = name or self.config.collection_name
        database = self.get_database()

        if collection_name not in self._collections:
            self._collections[collection_name] = select_collection(database, collection_name)

        return self._collections[collection_name]

    async def insert(self, document: Document, collection_name: Optional[str] = None) -> InsertAck:
        return await insert_document(self.get_collection(collection_name), document)

    async def find(self,
                   query: Optional[Mapping[str, Any]] = None,
                   collection_name: Optional[str] = None) -> List[Dict[str, Any]]:
        return await find_documents(self.get_collection(collection_name), query)

    async def find_as(self,
                      document_class: Type[T],
                      query: Optional[Mapping[str, Any]] = None,
                      collection_name: Optional[str] = None) -> List[T]:
        """Find documents and validate them into ``document_class``."""
        documents = await self.find(query, collection_name)
        return [document_class.from_mongo(data) for data in documents]

    @asynccontextmanager
    async def session(self) -> AsyncIterator['DatabaseManager']:
        """Connect for the duration of the block; always disconnect on exit."""
        await self.connect()
        try:
            yield self
        finally:
            if self.is_connected:
                await self.disconnect()
