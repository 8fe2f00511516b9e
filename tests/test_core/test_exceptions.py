"""Tests for the demo error taxonomy."""

import pytest
from pymongo.errors import AutoReconnect

from articles_demo.core.exceptions import (
    DemoError, StepError, DatabaseConnectionError, WriteError, ReadError,
    DisconnectError, ConfigurationError
)


class TestDemoError:

    def test_str_with_code(self):
        error = DemoError("something broke", error_code="X")
        assert str(error) == "[X] something broke"

    def test_str_without_code(self):
        error = DemoError("something broke")
        assert str(error) == "something broke"
        assert error.details == {}


class TestStepErrors:

    @pytest.mark.parametrize("error_class, code", [
        (DatabaseConnectionError, "CONNECTION_ERROR"),
        (WriteError, "WRITE_ERROR"),
        (ReadError, "READ_ERROR"),
        (DisconnectError, "DISCONNECT_ERROR"),
    ])
    def test_codes(self, error_class, code):
        error = error_class("failed")
        assert error.error_code == code
        assert isinstance(error, StepError)
        assert isinstance(error, DemoError)

    def test_cause_is_carried(self):
        cause = AutoReconnect("connection reset")
        error = WriteError("Failed to insert document", collection="articles", cause=cause)

        assert error.cause is cause
        assert "connection reset" in str(error)
        assert error.details == {"collection": "articles", "cause_type": "AutoReconnect"}

    def test_connection_error_records_uri(self):
        error = DatabaseConnectionError("Failed to connect", uri="mongodb://localhost:1")
        assert error.details["uri"] == "mongodb://localhost:1"
        assert error.cause is None

    def test_connection_error_does_not_shadow_builtin(self):
        assert not issubclass(DatabaseConnectionError, ConnectionError)


class TestConfigurationError:

    def test_config_key(self):
        error = ConfigurationError("Invalid document", config_key="document")
        assert error.error_code == "CONFIGURATION_ERROR"
        assert error.details == {"config_key": "document"}
