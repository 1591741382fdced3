"""
Pytest configuration and fixtures for promptapi tests.
"""

from unittest.mock import Mock

import pytest

from promptapi.models import ApiConfig, AppConfig


@pytest.fixture
def api_config():
    """API descriptor for the Ice and Fire API."""
    return ApiConfig(
        base_url="https://www.anapioficeandfire.com/api",
        documentation="GET /books lists books. GET /characters/{id} returns a character.",
    )


@pytest.fixture
def app_config():
    return AppConfig()


@pytest.fixture
def mock_completion_client():
    """A CompletionClient stand-in; set ``complete.side_effect`` per test."""
    client = Mock()
    client.model = "test-model"
    return client


@pytest.fixture(autouse=True)
def clear_path_env(monkeypatch):
    """Keep path overrides from the developer's shell out of tests."""
    for name in ("CONFIG_PATH", "API_CONFIG_PATH", "PUBLIC_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
