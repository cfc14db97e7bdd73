"""
Pytest Configuration and Shared Fixtures.

Provides settings, a controllable clock, app/client factories and mock
HTTP helpers for the Leave Portal tests.
"""

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

TEST_JWT_SECRET = "test-jwt-secret-key-0123456789abcdef"

BASE_ENV = {
    "LEAVE_JWT_SECRET_KEY": TEST_JWT_SECRET,
    "LEAVE_JWT_ALGORITHM": "HS256",
    "LEAVE_LOG_LEVEL": "DEBUG",
    "LEAVE_RECAPTCHA_SECRET_KEY": "",
    "LEAVE_ALLOWED_ORIGINS": "",
    "LEAVE_ALLOWED_REGIONS": "",
    "LEAVE_TRUST_PROXY_HEADERS": "false",
    "LEAVE_SEED_FILE": "",
}


# =============================================================================
# Environment / Settings Fixtures
# =============================================================================


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up a minimal valid environment."""
    for key, value in BASE_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(BASE_ENV)


@pytest.fixture
def settings_factory(mock_env_vars, monkeypatch) -> Callable[..., Any]:
    """
    Build LeaveSettings from the environment plus overrides.

    Overrides use environment variable names, e.g.
    ``settings_factory(LEAVE_QUERY_RATE_LIMIT="3")``.
    """
    from leave_portal.core.config import LeaveSettings

    def _create(**env: str):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return LeaveSettings(_env_file=None)

    return _create


@pytest.fixture
def settings(settings_factory):
    """Default test settings."""
    return settings_factory()


# =============================================================================
# Time Fixtures
# =============================================================================


class FakeClock:
    """Monotonic clock the tests can move forward."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorded_sleeps() -> tuple[list[float], Callable]:
    """Replacement for asyncio.sleep that records delays instead of waiting."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    return delays, _sleep


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def gate_factory(fake_clock, recorded_sleeps):
    """Build a RequestGate from settings with the fake clock and sleep."""
    from leave_portal.core.middleware.gate import RequestGate

    _, sleep = recorded_sleeps

    def _create(settings):
        gate = RequestGate.from_settings(settings, clock=fake_clock)
        gate._sleep = sleep
        return gate

    return _create


@pytest.fixture
def app_factory(gate_factory):
    """Create a Leave Portal app; store and gate may be supplied."""
    from leave_portal.core.server import create_app

    def _create(settings, store=None, gate=None):
        return create_app(settings, store=store, gate=gate or gate_factory(settings))

    return _create


@pytest.fixture
def app(app_factory, settings):
    return app_factory(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan running (shared HTTP client available)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def authenticator(settings):
    from leave_portal.core.security.tokens import Authenticator

    return Authenticator.from_settings(settings)


@pytest.fixture
def auth_headers(authenticator) -> dict[str, str]:
    token = authenticator.issue_token("operator@example.com")
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def append_payload() -> dict[str, str]:
    """A valid append body."""
    return {
        "claimCode": "GSL99000000001",
        "nationalId": "2000000009",
        "holderName": "Test Holder",
        "reportDate": "2025-03-01",
        "startDate": "2025-03-01",
        "endDate": "2025-03-10",
        "issuingPhysician": "Dr. Test",
        "jobTitle": "Consultant",
    }


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest.fixture
def mock_httpx_response_factory() -> Callable[..., MagicMock]:
    """
    Factory fixture for creating mock httpx responses.

    Returns a callable that creates mock responses with customizable properties.
    """
    def _create_response(
        status_code: int = 200,
        json_data: Any = None,
        json_error: Exception | None = None,
    ) -> MagicMock:
        mock_response = MagicMock()
        mock_response.status_code = status_code
        if json_error is not None:
            mock_response.json.side_effect = json_error
        else:
            mock_response.json.return_value = json_data if json_data is not None else {}
        return mock_response

    return _create_response


@pytest.fixture
def mock_httpx_client_factory() -> Callable[..., MagicMock]:
    """Factory for creating mock async httpx clients with a canned POST result."""
    def _create_client(
        post_response: MagicMock | None = None,
        post_error: Exception | None = None,
    ) -> MagicMock:
        mock_client = MagicMock()
        if post_error is not None:
            mock_client.post = AsyncMock(side_effect=post_error)
        else:
            mock_client.post = AsyncMock(return_value=post_response)
        mock_client.aclose = AsyncMock()
        return mock_client

    return _create_client
