"""Common types and enums for the articles demo."""

from enum import Enum
from typing import Any
from dataclasses import dataclass


class DemoStep(Enum):
    """Steps of the demo sequence, in execution order."""
    CONNECT = "connect"
    SELECT_DATABASE = "select_database"
    SELECT_COLLECTION = "select_collection"
    INSERT = "insert"
    FIND = "find"
    DISCONNECT = "disconnect"


class ConnectionState(Enum):
    """Lifecycle of a connection handle."""
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class LogLevel(Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ConfigValidationError(Exception):
    """Configuration validation error."""
    field: str
    message: str
    value: Any = None

    def __str__(self):
        return f"Configuration error in '{self.field}': {self.message}"
