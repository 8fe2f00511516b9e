"""
Exceptions raised by the demo steps.

Each step error wraps the driver exception that caused it; the original is
available both as ``__cause__`` and as ``.cause``.
"""

from typing import Optional, Dict, Any


class DemoError(Exception):
    """Base exception for all demo errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize demo error.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class StepError(DemoError):
    """A demo step failed because the database driver raised."""

    default_code = "STEP_ERROR"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        **kwargs
    ):
        """Initialize step error.

        Args:
            message: Error message
            cause: Driver exception that made the step fail
            **kwargs: Additional error details
        """
        if cause is not None:
            message = f"{message}: {cause}"
            kwargs.setdefault("cause_type", type(cause).__name__)
        super().__init__(message, error_code=self.default_code, details=kwargs)
        self.cause = cause


class DatabaseConnectionError(StepError):
    """Opening the authenticated session failed."""

    default_code = "CONNECTION_ERROR"

    def __init__(self, message: str, uri: Optional[str] = None, **kwargs):
        super().__init__(message, uri=uri, **kwargs)


class WriteError(StepError):
    """Inserting a document failed."""

    default_code = "WRITE_ERROR"

    def __init__(self, message: str, collection: Optional[str] = None, **kwargs):
        super().__init__(message, collection=collection, **kwargs)


class ReadError(StepError):
    """Querying a collection failed."""

    default_code = "READ_ERROR"

    def __init__(self, message: str, collection: Optional[str] = None, **kwargs):
        super().__init__(message, collection=collection, **kwargs)


class DisconnectError(StepError):
    """Closing the session failed, or the handle was not open."""

    default_code = "DISCONNECT_ERROR"


class ConfigurationError(DemoError):
    """Error in demo configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            error_code="CONFIGURATION_ERROR",
            details={"config_key": config_key, **kwargs}
        )
