"""Tests for provider adapters: request building, parsing and error bodies."""

import json
import re

import pytest

from relay_llm_sdk.config.settings import ProviderConfig
from relay_llm_sdk.models.conversation_types import ConversationTurn, TurnRole
from relay_llm_sdk.models.generation import GenerationParams, GenerationRequest, ProviderType
from relay_llm_sdk.providers import (
    GeminiAdapter,
    OpenAIAdapter,
    ParseError,
    Player2Adapter,
    create_adapter,
    extract_error_message,
)
from relay_llm_sdk.providers.openai.payloads import normalize_endpoint

FOLDED = re.compile(r"^\d+ You are terse\.$")


def _request(model, instruction="You are terse.", params=None, turns=None):
    return GenerationRequest(
        instruction=instruction,
        model=model,
        turns=turns if turns is not None else [
            ConversationTurn(role=TurnRole.USER, content="Hi"),
            ConversationTurn(role=TurnRole.ASSISTANT, content="Hello"),
            ConversationTurn(role=TurnRole.USER, content="Joke?"),
        ],
        params=params or GenerationParams(),
    )


class TestGeminiAdapter:
    """Gemini generateContent dialect."""

    def test_endpoints(self, gemini_config):
        adapter = GeminiAdapter(gemini_config)

        assert adapter.endpoint("gemini-2.5-pro", stream=False) == (
            "https://gemini.test/v1beta/models/gemini-2.5-pro:generateContent"
        )
        assert adapter.endpoint("gemini-2.5-pro", stream=True) == (
            "https://gemini.test/v1beta/models/gemini-2.5-pro:streamGenerateContent?alt=sse"
        )
        assert adapter.stream_framing == "sse"

    def test_array_streaming_endpoint(self, gemini_config):
        adapter = GeminiAdapter(gemini_config, use_sse=False)

        assert adapter.endpoint("m", stream=True).endswith("/models/m:streamGenerateContent")
        assert adapter.stream_framing == "array"

    def test_default_base_url_and_missing_model(self):
        adapter = GeminiAdapter(ProviderConfig(provider=ProviderType.GOOGLE, api_key="k"))

        assert adapter.endpoint("gemini-pro", stream=False).startswith(
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro"
        )
        assert adapter.endpoint(None, stream=False) is None

    def test_credential_goes_in_header_not_url(self, gemini_config):
        adapter = GeminiAdapter(gemini_config)

        assert adapter.headers()["x-goog-api-key"] == "test-google-key"
        assert "test-google-key" not in adapter.endpoint("gemini-2.5-pro", stream=True)

    def test_build_request(self, gemini_config):
        adapter = GeminiAdapter(gemini_config)
        params = GenerationParams(temperature=0.5, top_p=0.8, max_tokens=100)

        body = adapter.build_request(_request("gemini-2.5-pro", params=params), stream=False)

        assert body["systemInstruction"] == {"parts": [{"text": "You are terse."}]}
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
        assert body["contents"][1]["parts"] == [{"text": "Hello"}]
        assert body["generationConfig"] == {"temperature": 0.5, "topP": 0.8, "maxOutputTokens": 100}

    def test_unset_options_are_omitted(self, gemini_config):
        body = GeminiAdapter(gemini_config).build_request(_request("gemini-2.5-pro"), stream=False)

        assert "generationConfig" not in body

    def test_system_turns_merge_into_instruction(self, gemini_config):
        turns = [
            ConversationTurn(role=TurnRole.SYSTEM, content="Stay in character."),
            ConversationTurn(role=TurnRole.USER, content="Hi"),
        ]
        body = GeminiAdapter(gemini_config).build_request(_request("gemini-2.5-pro", turns=turns), stream=False)

        assert body["systemInstruction"]["parts"][0]["text"] == "You are terse.\nStay in character."
        assert body["contents"] == [{"role": "user", "parts": [{"text": "Hi"}]}]

    def test_gemma_folds_instruction_into_user_turn(self, gemini_config):
        body = GeminiAdapter(gemini_config).build_request(_request("gemma-3-27b-it"), stream=False)

        assert "systemInstruction" not in body
        first = body["contents"][0]
        assert first["role"] == "user"
        assert FOLDED.match(first["parts"][0]["text"])
        assert len(body["contents"]) == 4

    def test_flash_forces_thinking_budget_zero(self, gemini_config):
        params = GenerationParams(thinking_budget=2048)
        body = GeminiAdapter(gemini_config).build_request(
            _request("gemini-2.5-flash", params=params), stream=True
        )

        assert body["generationConfig"]["thinkingConfig"] == {"thinkingBudget": 0}

    def test_thinking_budget_passes_through_for_other_models(self, gemini_config):
        params = GenerationParams(thinking_budget=2048)
        body = GeminiAdapter(gemini_config).build_request(_request("gemini-2.5-pro", params=params), stream=False)

        assert body["generationConfig"]["thinkingConfig"] == {"thinkingBudget": 2048}

    def test_parse_full_response(self, gemini_config):
        text = json.dumps({
            "candidates": [{
                "content": {"role": "model", "parts": [{"text": "Why did "}, {"text": "the chicken..."}]},
                "finishReason": "STOP",
            }],
            "usageMetadata": {"promptTokenCount": 10, "totalTokenCount": 42},
        })

        parsed = GeminiAdapter(gemini_config).parse_full_response(text)

        assert parsed.text == "Why did the chicken..."
        assert parsed.token_count == 42
        assert parsed.finish_reason == "STOP"

    def test_parse_without_usage_reports_zero_tokens(self, gemini_config):
        text = json.dumps({"candidates": [{"content": {"parts": [{"text": "ok"}]}}]})

        assert GeminiAdapter(gemini_config).parse_full_response(text).token_count == 0

    def test_parse_invalid_json_raises(self, gemini_config):
        with pytest.raises(ParseError):
            GeminiAdapter(gemini_config).parse_full_response("not json")

    def test_parse_without_candidates_raises(self, gemini_config):
        with pytest.raises(ParseError):
            GeminiAdapter(gemini_config).parse_full_response('{"promptFeedback": {}}')

    def test_truncation_reason(self, gemini_config):
        adapter = GeminiAdapter(gemini_config)

        assert adapter.is_truncated("MAX_TOKENS") is True
        assert adapter.is_truncated("STOP") is False
        assert adapter.is_truncated(None) is False

    def test_parse_fragment(self, gemini_config):
        adapter = GeminiAdapter(gemini_config)
        fragment = adapter.parse_fragment({
            "candidates": [{"content": {"parts": [{"text": "chunk"}]}}],
            "usageMetadata": {"totalTokenCount": 7},
        })

        assert fragment.text == "chunk"
        assert fragment.token_count == 7

    def test_parse_fragment_is_lenient(self, gemini_config):
        adapter = GeminiAdapter(gemini_config)

        assert adapter.parse_fragment({"unexpected": True}).text == ""
        assert adapter.parse_fragment([1, 2]).text == ""


class TestOpenAIAdapter:
    """OpenAI chat completions dialect."""

    @pytest.mark.parametrize("base_url,expected", [
        ("https://api.openai.com", "https://api.openai.com/v1/chat/completions"),
        ("https://api.openai.com/", "https://api.openai.com/v1/chat/completions"),
        ("  http://localhost:1234  ", "http://localhost:1234/v1/chat/completions"),
        ("https://api.z.ai/api/paas/v4/chat/completions", "https://api.z.ai/api/paas/v4/chat/completions"),
        ("https://proxy.test/custom/", "https://proxy.test/custom"),
    ])
    def test_endpoint_normalisation(self, base_url, expected):
        assert normalize_endpoint(base_url) == expected

    @pytest.mark.parametrize("base_url", [None, "", "   ", "not a url"])
    def test_unusable_endpoint(self, base_url):
        assert normalize_endpoint(base_url) is None

    def test_default_endpoints_per_provider(self):
        deepseek = OpenAIAdapter(ProviderConfig(provider=ProviderType.DEEPSEEK, api_key="k"))
        openrouter = OpenAIAdapter(ProviderConfig(provider=ProviderType.OPENROUTER, api_key="k"))
        custom = OpenAIAdapter(ProviderConfig(provider=ProviderType.CUSTOM))

        assert deepseek.endpoint("deepseek-chat", stream=False) == "https://api.deepseek.com/v1/chat/completions"
        assert openrouter.endpoint("x", stream=True) == "https://openrouter.ai/api/v1/chat/completions"
        assert custom.endpoint("x", stream=False) is None

    def test_headers(self):
        config = ProviderConfig(
            provider=ProviderType.OPENROUTER,
            api_key="sk-test",
            extra_headers={"HTTP-Referer": "https://example.test"},
        )
        headers = OpenAIAdapter(config).headers()

        assert headers["Authorization"] == "Bearer sk-test"
        assert headers["HTTP-Referer"] == "https://example.test"

    def test_local_server_needs_no_key(self):
        adapter = OpenAIAdapter(ProviderConfig(provider=ProviderType.LOCAL, base_url="http://localhost:11434"))

        assert adapter.is_available() is True
        assert "Authorization" not in adapter.headers()

    def test_cloud_provider_requires_key(self):
        adapter = OpenAIAdapter(ProviderConfig(provider=ProviderType.OPENAI, model="gpt-4o"))

        assert adapter.is_available() is False

    def test_build_request(self, openai_config):
        params = GenerationParams(temperature=0.7, frequency_penalty=0.5, presence_penalty=-0.5)
        body = OpenAIAdapter(openai_config).build_request(_request("gpt-4o-mini", params=params), stream=False)

        assert body["model"] == "gpt-4o-mini"
        assert body["messages"][0] == {"role": "system", "content": "You are terse."}
        assert [m["role"] for m in body["messages"][1:]] == ["user", "assistant", "user"]
        assert body["temperature"] == 0.7
        assert body["frequency_penalty"] == 0.5
        assert body["presence_penalty"] == -0.5
        assert "top_p" not in body
        assert "max_tokens" not in body
        assert "stream" not in body

    def test_streaming_request_asks_for_usage(self, openai_config):
        body = OpenAIAdapter(openai_config).build_request(_request("gpt-4o-mini"), stream=True)

        assert body["stream"] is True
        assert body["stream_options"] == {"include_usage": True}

    def test_gemma_instruction_is_folded(self, openai_config):
        body = OpenAIAdapter(openai_config).build_request(_request("google/gemma-2-9b-it"), stream=False)

        assert all(m["role"] != "system" for m in body["messages"])
        assert FOLDED.match(body["messages"][0]["content"])

    def test_parse_full_response(self, openai_config):
        text = json.dumps({
            "choices": [{"message": {"role": "assistant", "content": "Hi!"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
        })

        parsed = OpenAIAdapter(openai_config).parse_full_response(text)

        assert (parsed.text, parsed.token_count, parsed.finish_reason) == ("Hi!", 7, "stop")

    def test_parse_error_body_with_success_status(self, openai_config):
        with pytest.raises(ParseError) as exc_info:
            OpenAIAdapter(openai_config).parse_full_response('{"error": {"message": "model not found"}}')

        assert exc_info.value.message == "model not found"

    def test_length_is_truncation(self, openai_config):
        adapter = OpenAIAdapter(openai_config)

        assert adapter.is_truncated("length") is True
        assert adapter.is_truncated("stop") is False

    def test_parse_fragments(self, openai_config):
        adapter = OpenAIAdapter(openai_config)

        delta = adapter.parse_fragment({"choices": [{"delta": {"content": "Hel"}, "finish_reason": None}]})
        final = adapter.parse_fragment({"choices": [], "usage": {"total_tokens": 31}})
        role_only = adapter.parse_fragment({"choices": [{"delta": {"role": "assistant"}}]})

        assert delta.text == "Hel"
        assert final.text == "" and final.token_count == 31
        assert role_only.text == ""


class TestPlayer2Adapter:
    """Player2 variant of the OpenAI dialect."""

    def test_no_model_field_and_client_id_header(self, player2_config):
        adapter = Player2Adapter(player2_config, client_id="client-123")
        body = adapter.build_request(_request("ignored-model"), stream=True)

        assert "model" not in body
        assert adapter.headers()["X-Game-Client-Id"] == "client-123"
        assert adapter.headers()["Authorization"] == "Bearer test-player2-key"
        assert adapter.endpoint(None, stream=True) == "https://player2.test/v1/chat/completions"

    def test_client_id_from_environment(self, player2_config, monkeypatch):
        monkeypatch.setenv("RELAY_PLAYER2_CLIENT_ID", "env-client")

        assert Player2Adapter(player2_config).headers()["X-Game-Client-Id"] == "env-client"

    def test_in_stream_error_fragment(self, player2_config):
        fragment = Player2Adapter(player2_config).parse_fragment(
            {"error": {"message": "ResourceExhausted: out of credits"}}
        )

        assert fragment.error == "ResourceExhausted: out of credits"

    def test_quota_markers(self, player2_config):
        adapter = Player2Adapter(player2_config)

        assert adapter.is_quota_message("ResourceExhausted: slow down") is True
        assert adapter.is_quota_message("Insufficient credits") is True
        assert adapter.is_quota_message("Internal error") is False


class TestErrorMessageExtraction:
    """Shared error body parsing."""

    @pytest.mark.parametrize("body,expected", [
        ('{"error": {"code": 429, "message": "Resource exhausted"}}', "Resource exhausted"),
        ('[{"error": {"message": "first element"}}]', "first element"),
        ('{"error": "plain string"}', "plain string"),
        ('data: {"error": {"message": "inside sse"}}\n\n', "inside sse"),
        ('{"error": {}}', None),
        ('{"message": "no envelope"}', None),
        ("<html>Bad Gateway</html>", None),
        ("", None),
        (None, None),
    ])
    def test_extract_error_message(self, body, expected):
        assert extract_error_message(body) == expected


@pytest.mark.parametrize("provider,adapter_cls", [
    (ProviderType.GOOGLE, GeminiAdapter),
    (ProviderType.PLAYER2, Player2Adapter),
    (ProviderType.OPENAI, OpenAIAdapter),
    (ProviderType.DEEPSEEK, OpenAIAdapter),
    (ProviderType.GROK, OpenAIAdapter),
    (ProviderType.GLM, OpenAIAdapter),
    (ProviderType.OPENROUTER, OpenAIAdapter),
    (ProviderType.LOCAL, OpenAIAdapter),
    (ProviderType.CUSTOM, OpenAIAdapter),
])
def test_create_adapter(provider, adapter_cls):
    adapter = create_adapter(ProviderConfig(provider=provider, model="m"))

    assert type(adapter) is adapter_cls
    assert adapter.get_provider_name() == provider.value
