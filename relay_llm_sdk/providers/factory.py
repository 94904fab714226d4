"""
Adapter factory.

Maps a provider configuration to the adapter that speaks its dialect.
"""

from ..config.settings import ProviderConfig
from ..models.generation import ProviderType
from .base import ProviderAdapter
from .gemini import GeminiAdapter
from .openai import OpenAIAdapter
from .player2 import Player2Adapter

_ADAPTERS = {
    ProviderType.GOOGLE: GeminiAdapter,
    ProviderType.PLAYER2: Player2Adapter,
}


def create_adapter(config: ProviderConfig) -> ProviderAdapter:
    """
    Create the adapter for a provider configuration.

    Providers without a dedicated dialect use the OpenAI-compatible adapter.

    Args:
        config: Active provider configuration

    Returns:
        ProviderAdapter bound to ``config``
    """
    adapter_cls = _ADAPTERS.get(config.provider, OpenAIAdapter)
    return adapter_cls(config)
