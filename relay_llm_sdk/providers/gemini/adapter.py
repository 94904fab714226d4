from typing import Any, Dict, Optional

from ...config.endpoints import get_endpoint_url
from ...config.settings import ProviderConfig
from ...core.capabilities import get_model_quirks
from ...models.generation import GenerationRequest, ParsedResponse, ResponseFragment
from ..base import ProviderAdapter
from .parsers import parse_gemini_chunk, parse_gemini_response
from .payloads import build_gemini_payload


class GeminiAdapter(ProviderAdapter):
    """Google Gemini ``generateContent`` dialect."""

    truncation_reasons = frozenset({"MAX_TOKENS"})

    def __init__(self, config: ProviderConfig, use_sse: bool = True):
        super().__init__(config)
        # Without alt=sse Gemini streams one top-level JSON array
        self.use_sse = use_sse

    @property
    def stream_framing(self) -> str:
        return "sse" if self.use_sse else "array"

    def endpoint(self, model: Optional[str], stream: bool) -> Optional[str]:
        base_url = self.config.base_url or get_endpoint_url(self.config.provider)
        if not base_url or not model:
            return None
        url = f"{base_url.rstrip('/')}/models/{model}"
        if not stream:
            return f"{url}:generateContent"
        if self.use_sse:
            return f"{url}:streamGenerateContent?alt=sse"
        return f"{url}:streamGenerateContent"

    def headers(self) -> Dict[str, str]:
        headers = {}
        if self.config.api_key:
            headers["x-goog-api-key"] = self.config.api_key
        return self._merge_headers(headers)

    def build_request(self, request: GenerationRequest, stream: bool) -> Dict[str, Any]:
        quirks = get_model_quirks(request.model)
        return build_gemini_payload(request, quirks)

    def parse_full_response(self, text: str) -> ParsedResponse:
        return parse_gemini_response(text)

    def parse_fragment(self, value: Any) -> ResponseFragment:
        return parse_gemini_chunk(value)
