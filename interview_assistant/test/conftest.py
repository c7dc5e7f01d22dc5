"""
Shared fixtures for the interview assistant tests.
"""
import pytest

from interview_assistant.core.ai_client_manager import AIClientManager
from interview_assistant.core.settings import get_settings
from interview_assistant.test.gateway_fakes import FakeClientManager, FakeGatewayClient, RecordingMessageLogger

ENV_VARS = [
    "OPENROUTER_API_KEY", "AI_MODELS", "DATABASE_URL", "DB_USER", "DB_PASSWORD",
    "DB_HOST", "DB_PORT", "DB_NAME", "ZOOM_SDK_KEY", "ZOOM_SDK_SECRET",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Run every test without gateway, database or Zoom credentials from the host."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    AIClientManager.reset()
    yield
    get_settings.cache_clear()
    AIClientManager.reset()


@pytest.fixture
def gateway():
    """Factory: gateway(outcomes, request_delay=0.0) -> FakeGatewayClient."""
    return FakeGatewayClient


@pytest.fixture
def client_manager():
    """Factory: client_manager(client, configured=True, models=None) -> FakeClientManager."""
    return FakeClientManager


@pytest.fixture
def recording_logger():
    return RecordingMessageLogger()
