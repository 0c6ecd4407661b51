"""
Pytest configuration and fixtures for the MEXC dashboard core test suite.
"""

import json
from unittest.mock import Mock

import pytest

from mexc_dashboard.security.encryption import EncryptionCodec


TEST_MASTER_SECRET = "test-master-secret-for-unit-tests"


class FakeClock:
    """Epoch-millisecond clock advanced by hand."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def make_response(status_code: int = 200, body=None, reason: str = "OK"):
    """Build a stand-in for ``requests.Response``; dict/list bodies are JSON-encoded."""
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    if body is None:
        response.text = ''
    elif isinstance(body, str):
        response.text = body
    else:
        response.text = json.dumps(body)
    return response


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_session():
    """HTTP session whose ``request`` returns an empty JSON object by default."""
    session = Mock()
    session.headers = {}
    session.request.return_value = make_response(200, {})
    return session


@pytest.fixture(scope="session")
def codec():
    return EncryptionCodec(TEST_MASTER_SECRET)


@pytest.fixture
def temp_config_dir(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("ENCRYPTION_SECRET", TEST_MASTER_SECRET)
    monkeypatch.setenv("TESTING", "True")
    yield
