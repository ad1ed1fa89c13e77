"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Configuration: facebook_config, facebook_config_with_secret, mock_settings
2. Webhook bodies: text_webhook_body, postback_webhook_body, read_webhook_body
3. Services: mock_messaging_service, mock_conversation_handler
4. Infrastructure: test_client, mock_logfire, logfire_capture

Data builders shared by the test modules live in tests/factories.py.
"""

import os
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from hypothesis import HealthCheck, settings as hypothesis_settings

try:
    import logfire
except ImportError:
    logfire = None

from messenger_driver.models.config_models import FacebookConfig
from messenger_driver.services.messaging_protocol import MockMessagingService
from tests.factories import (
    TEST_APP_SECRET,
    TEST_PAGE_TOKEN,
    TEST_VERIFY_TOKEN,
    envelope,
    make_item,
    postback_item,
    text_item,
    to_body,
)

# Tests run without logfire.configure(); keep it quiet
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

# mock_settings is an autouse, function-scoped fixture
hypothesis_settings.register_profile(
    "messenger", suppress_health_check=[HealthCheck.function_scoped_fixture]
)
hypothesis_settings.load_profile("messenger")


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def facebook_config():
    """Credentials without an app secret (signature checks disabled)."""
    return FacebookConfig(token=TEST_PAGE_TOKEN, verification=TEST_VERIFY_TOKEN)


@pytest.fixture
def facebook_config_with_secret():
    """Credentials with an app secret (signature checks enabled)."""
    return FacebookConfig(
        token=TEST_PAGE_TOKEN,
        app_secret=TEST_APP_SECRET,
        verification=TEST_VERIFY_TOKEN,
    )


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch):
    """Mock application settings everywhere get_settings() is imported."""
    from messenger_driver.config import Settings

    settings = Settings(
        facebook_page_access_token=TEST_PAGE_TOKEN,
        facebook_verify_token=TEST_VERIFY_TOKEN,
        facebook_app_secret=TEST_APP_SECRET,
        env="local",
        logfire_token=None,
    )

    monkeypatch.setattr("messenger_driver.config.get_settings", lambda: settings)
    monkeypatch.setattr("messenger_driver.api.webhook.get_settings", lambda: settings)
    monkeypatch.setattr("messenger_driver.main.get_settings", lambda: settings)
    monkeypatch.setattr("messenger_driver.logging_config.get_settings", lambda: settings)
    return settings


# =============================================================================
# Webhook bodies
# =============================================================================


@pytest.fixture
def text_webhook_body():
    return to_body(envelope(text_item("Hello bot")))


@pytest.fixture
def postback_webhook_body():
    return to_body(envelope(postback_item("MENU_PAYLOAD")))


@pytest.fixture
def read_webhook_body():
    return to_body(envelope(make_item(read={"watermark": 1458668856253})))


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def mock_messaging_service():
    """Recording MessagingService that never touches the network."""
    return MockMessagingService()


@pytest.fixture
def mock_conversation_handler():
    """Conversation handler replying "Echo: <text>" to every message."""
    handler = MagicMock()

    async def respond(message, driver):
        return f"Echo: {message.text}"

    handler.respond = AsyncMock(side_effect=respond)
    handler.on_event = AsyncMock(return_value=None)
    return handler


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def test_client(mock_settings, mock_logfire):
    """FastAPI TestClient for E2E tests."""
    from fastapi.testclient import TestClient

    from messenger_driver.main import app

    return TestClient(app)


@pytest.fixture
def logfire_capture():
    """Capture Logfire calls for assertion."""
    if logfire is None:
        pytest.skip("logfire not available")

    captured_logs = []

    def capture(level):
        def _capture(*args, **kwargs):
            captured_logs.append((level, args, kwargs))

        return _capture

    with (
        patch("logfire.info", side_effect=capture("info")),
        patch("logfire.warn", side_effect=capture("warn")),
        patch("logfire.error", side_effect=capture("error")),
    ):
        yield captured_logs


@pytest.fixture
def mock_logfire(monkeypatch):
    """Mock Logfire in every module that logs through it."""

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in (
        "messenger_driver.services.event_classifier",
        "messenger_driver.services.facebook_service",
        "messenger_driver.services.conversation",
        "messenger_driver.middleware.correlation_id",
        "messenger_driver.logging_config",
        "messenger_driver.main",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module
