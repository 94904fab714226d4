from typing import Any, Dict, Optional

from ...config.endpoints import get_endpoint_url
from ...core.capabilities import get_model_quirks
from ...models.generation import GenerationRequest, ParsedResponse, ResponseFragment
from ..base import ProviderAdapter
from .parsers import parse_chat_chunk, parse_chat_response
from .payloads import build_chat_payload, normalize_endpoint


class OpenAIAdapter(ProviderAdapter):
    """
    OpenAI chat completions dialect.

    Also used for every OpenAI-compatible backend (DeepSeek, Grok, GLM,
    OpenRouter, local servers, custom endpoints).
    """

    truncation_reasons = frozenset({"length"})
    include_model = True

    @property
    def requires_api_key(self) -> bool:
        # Local and custom servers often run without authentication
        return self.config.provider.value not in ("local", "custom")

    def endpoint(self, model: Optional[str], stream: bool) -> Optional[str]:
        return normalize_endpoint(self.config.base_url or get_endpoint_url(self.config.provider))

    def headers(self) -> Dict[str, str]:
        headers = {}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return self._merge_headers(headers)

    def build_request(self, request: GenerationRequest, stream: bool) -> Dict[str, Any]:
        quirks = get_model_quirks(request.model)
        return build_chat_payload(request, quirks, stream, include_model=self.include_model)

    def parse_full_response(self, text: str) -> ParsedResponse:
        return parse_chat_response(text)

    def parse_fragment(self, value: Any) -> ResponseFragment:
        return parse_chat_chunk(value)
