"""
Root pytest configuration and fixtures for the writecraft SDK.
"""

import os
from pathlib import Path
import sys

import pytest
import responses

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def api_key():
    """Test API key."""
    return "sk-ant-test-12345"


@pytest.fixture
def base_url():
    """Test base URL."""
    return "https://api.test.writecraft.dev"


@pytest.fixture
def messages_url(base_url):
    return f"{base_url}/v1/messages"


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables before each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("WRITECRAFT_") or key == "ANTHROPIC_API_KEY":
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_requests():
    """Mock HTTP requests using responses library."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client(api_key, base_url):
    """Client with an explicit key, so no credential store is touched."""
    from writecraft import Writecraft

    c = Writecraft(api_key=api_key, base_url=base_url)
    yield c
    c.close()
