"""
Relay LLM SDK - one chat completion interface over several LLM backends.

Supported dialects:
- Google Gemini (generateContent)
- OpenAI chat completions and compatible backends (DeepSeek, Grok, GLM,
  OpenRouter, local servers)
- Player2

Features:
- Buffered and streaming calls with cooperative cancellation
- Incremental JSON decoding of SSE and streamed-array responses
- Typed failures carrying a diagnostic Payload
- One-retry failover to the next configured provider/model
"""

__version__ = "0.1.0"

from .api.chat import ChatClient
from .api.client import RelayLLMClient
from .config.settings import ProviderConfig, ProviderSettings
from .http.cancellation import CancellationToken, abort_current_request
from .models.conversation_types import ConversationTurn, TurnRole
from .models.generation import (
    GenerationParams,
    GenerationRequest,
    ParsedResponse,
    ProviderType,
    ResponseFragment,
)
from .models.payload import Payload
from .providers.errors import ParseError, QuotaError, RequestError, TransportError
from .reliability.failover import reset_quota_warning

__all__ = [
    # Clients
    "RelayLLMClient",
    "ChatClient",

    # Configuration
    "ProviderConfig",
    "ProviderSettings",

    # Cancellation
    "CancellationToken",
    "abort_current_request",

    # Models
    "ConversationTurn",
    "TurnRole",
    "GenerationParams",
    "GenerationRequest",
    "ParsedResponse",
    "ProviderType",
    "ResponseFragment",
    "Payload",

    # Errors
    "RequestError",
    "TransportError",
    "QuotaError",
    "ParseError",
    "reset_quota_warning",
]
