"""Test configuration specific to foundation layer tests."""

import pytest
import tempfile
import os


ENV_KEYS = [
    'MONGODB_CONNECTION_STRING', 'MONGODB_USERNAME', 'MONGODB_PASSWORD',
    'DATABASE_NAME', 'COLLECTION_NAME', 'MONGODB_TIMEOUT_MS',
    'LOG_LEVEL', 'STRUCTURED_LOGGING', 'LOG_FILE'
]


@pytest.fixture
def temp_env_file():
    """Create a temporary .env file for testing."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False) as f:
        f.write("MONGODB_CONNECTION_STRING=mongodb://db.example:27017\n")
        f.write("MONGODB_USERNAME=reader\n")
        f.write("MONGODB_PASSWORD=s3cret\n")
        f.write("DATABASE_NAME=blog\n")
        f.write("LOG_LEVEL=debug\n")
        env_file = f.name

    yield env_file
    os.unlink(env_file)


@pytest.fixture
def clean_env():
    """Remove every variable the config loader reads; restore the environment afterwards."""
    original_env = dict(os.environ)
    for key in ENV_KEYS:
        os.environ.pop(key, None)

    yield

    os.environ.clear()
    os.environ.update(original_env)
