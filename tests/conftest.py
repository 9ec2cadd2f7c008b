"""Pytest configuration and common fixtures."""

import asyncio
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from login_wizard.core.settings import reset_settings
from login_wizard.services.auth.api import ApiRequest
from login_wizard.services.auth.models import (
    Credentials,
    HomeServerConnectionConfig,
)
from login_wizard.services.auth.secret import CorrelationSecretProvider

TEST_HOMESERVER = "https://matrix.example.org"
TEST_CLIENT_SECRET = "0f4e7c1a-test-client-secret"


class RecordingTransport:
    """
    Transport double recording every request.

    Outcomes are queued per endpoint name: a value is returned, an
    exception is raised, an ``asyncio.Future`` is awaited first.
    """

    def __init__(self) -> None:
        self.requests: List[ApiRequest] = []
        self._outcomes: Dict[str, List[Any]] = defaultdict(list)
        self.closed = False

    def queue(self, endpoint: str, *outcomes: Any) -> None:
        self._outcomes[endpoint].extend(outcomes)

    async def execute(self, request: ApiRequest) -> Optional[Any]:
        self.requests.append(request)
        pending = self._outcomes[request.endpoint]
        if not pending:
            raise AssertionError(f"Unexpected {request.endpoint} request")
        outcome = pending.pop(0)
        if isinstance(outcome, asyncio.Future):
            outcome = await outcome
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def bodies(self, endpoint: str) -> List[Dict[str, Any]]:
        return [r.json_body() for r in self.requests if r.endpoint == endpoint]

    async def close(self) -> None:
        self.closed = True


class FixedSecretProvider(CorrelationSecretProvider):
    """Secret provider returning a known secret and counting calls."""

    def __init__(self, secret: str = TEST_CLIENT_SECRET):
        self.secret = secret
        self.calls = 0

    def generate(self) -> str:
        self.calls += 1
        return self.secret


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("HOMESERVER_URL", TEST_HOMESERVER)
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.delenv("IDENTITY_SERVER_URL", raising=False)
    monkeypatch.delenv("TRANSPORT_MAX_ATTEMPTS", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    # Reset settings singleton so each test gets fresh settings
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def transport() -> RecordingTransport:
    """Recording transport double."""
    return RecordingTransport()


@pytest.fixture
def secret_provider() -> FixedSecretProvider:
    """Deterministic client secret provider."""
    return FixedSecretProvider()


@pytest.fixture
def connection_config() -> HomeServerConnectionConfig:
    """Connection config of the test homeserver."""
    return HomeServerConnectionConfig(homeserver_uri=TEST_HOMESERVER)


@pytest.fixture
def credentials() -> Credentials:
    """Credentials as returned by a successful login."""
    return Credentials(
        user_id="@alice:example.org",
        access_token="syt_access_token",
        home_server="example.org",
        device_id="DEVICEID",
    )
