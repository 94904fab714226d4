"""Shared pytest fixtures for Relay LLM SDK tests."""

import pytest

from relay_llm_sdk.config.settings import ProviderConfig, ProviderSettings
from relay_llm_sdk.models.conversation_types import ConversationTurn, TurnRole
from relay_llm_sdk.models.generation import GenerationParams, GenerationRequest, ProviderType
from relay_llm_sdk.reliability.failover import reset_quota_warning
from tests.helpers.http_mocks import RecordingNotifier

RELAY_ENV_VARS = [
    "RELAY_PROVIDER",
    "RELAY_MODEL",
    "RELAY_API_KEY",
    "RELAY_BASE_URL",
    "RELAY_EXTRA_HEADERS",
    "RELAY_FALLBACK_PROVIDER",
    "RELAY_FALLBACK_MODEL",
    "RELAY_FALLBACK_API_KEY",
    "RELAY_FALLBACK_BASE_URL",
    "RELAY_FALLBACK_EXTRA_HEADERS",
    "RELAY_CONNECT_TIMEOUT",
    "RELAY_READ_TIMEOUT",
    "RELAY_PLAYER2_CLIENT_ID",
]


@pytest.fixture(autouse=True)
def clean_relay_env(monkeypatch):
    """Keep a developer's .env/environment out of the tests."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # from_env() must not pick up a local .env file
    monkeypatch.setattr("relay_llm_sdk.config.settings.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture(autouse=True)
def fresh_quota_warning():
    """The quota warning flag is process-wide."""
    reset_quota_warning()
    yield
    reset_quota_warning()


@pytest.fixture
def gemini_config():
    return ProviderConfig(
        provider=ProviderType.GOOGLE,
        model="gemini-2.5-pro",
        api_key="test-google-key",
        base_url="https://gemini.test/v1beta",
    )


@pytest.fixture
def openai_config():
    return ProviderConfig(
        provider=ProviderType.OPENAI,
        model="gpt-4o-mini",
        api_key="test-openai-key",
        base_url="https://openai.test",
    )


@pytest.fixture
def player2_config():
    return ProviderConfig(
        provider=ProviderType.PLAYER2,
        api_key="test-player2-key",
        base_url="https://player2.test",
    )


@pytest.fixture
def make_settings():
    """Build cloud-rotation settings from a list of configs."""
    def _make(*configs: ProviderConfig) -> ProviderSettings:
        return ProviderSettings(cloud_configs=list(configs))
    return _make


@pytest.fixture
def sample_turns():
    return [
        ConversationTurn(role=TurnRole.USER, content="Hello there"),
        ConversationTurn(role=TurnRole.ASSISTANT, content="Hi! How can I help?"),
        ConversationTurn(role=TurnRole.USER, content="Tell me a joke"),
    ]


@pytest.fixture
def sample_params():
    return GenerationParams(temperature=0.7, top_p=0.9, max_tokens=256)


@pytest.fixture
def sample_request(sample_turns, sample_params):
    return GenerationRequest(
        instruction="You are a helpful assistant.",
        turns=sample_turns,
        params=sample_params,
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()
