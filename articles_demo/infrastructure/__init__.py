"""Infrastructure layer for the MongoDB integration."""

from .database import (
    DatabaseManager,
    InsertAck,
    MongoConnection,
    MongoDocument,
    connect_mongodb,
    select_database,
    select_collection,
    insert_document,
    find_documents,
    disconnect_mongodb,
)

__all__ = [
    "DatabaseManager",
    "InsertAck",
    "MongoConnection",
    "MongoDocument",
    "connect_mongodb",
    "select_database",
    "select_collection",
    "insert_document",
    "find_documents",
    "disconnect_mongodb",
]
