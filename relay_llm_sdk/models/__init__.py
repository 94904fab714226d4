from .conversation_types import ConversationTurn, TurnRole
from .generation import (
    GenerationParams,
    GenerationRequest,
    ParsedResponse,
    ProviderType,
    ResponseFragment,
)
from .payload import Payload

__all__ = [
    "ConversationTurn",
    "TurnRole",
    "GenerationParams",
    "GenerationRequest",
    "ParsedResponse",
    "ProviderType",
    "ResponseFragment",
    "Payload",
]
