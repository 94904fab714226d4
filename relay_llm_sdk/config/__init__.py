"""Configuration layer: provider settings, endpoints and shared constants."""

from .endpoints import OPENAI_CHAT_PATH, PROVIDER_BASE_URLS, get_endpoint_url
from .settings import ProviderConfig, ProviderSettings

__all__ = [
    "OPENAI_CHAT_PATH",
    "PROVIDER_BASE_URLS",
    "get_endpoint_url",
    "ProviderConfig",
    "ProviderSettings",
]
