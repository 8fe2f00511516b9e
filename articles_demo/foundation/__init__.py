"""Foundation layer for the articles demo."""

from .config import ConfigManager, DatabaseConfig, DemoConfig, load_config
from .logging import get_logger, setup_logging
from .types import *

__all__ = [
    "ConfigManager",
    "DatabaseConfig",
    "DemoConfig",
    "load_config",
    "get_logger",
    "setup_logging",
    "DemoStep",
    "ConnectionState",
    "LogLevel",
    "ConfigValidationError",
]
