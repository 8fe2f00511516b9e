"""
Core components for the articles demo.

Holds the error taxonomy shared by the infrastructure layer and the runner.
"""

from .exceptions import (
    DemoError,
    StepError,
    DatabaseConnectionError,
    WriteError,
    ReadError,
    DisconnectError,
    ConfigurationError
)

__all__ = [
    'DemoError',
    'StepError',
    'DatabaseConnectionError',
    'WriteError',
    'ReadError',
    'DisconnectError',
    'ConfigurationError'
]
