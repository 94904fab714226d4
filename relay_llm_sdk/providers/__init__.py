"""
Provider Adapters Layer

This layer contains all provider-specific translation code.
Each adapter converts between the SDK's normalized request model
and one backend's JSON dialect.
"""

from .base import ProviderAdapter, extract_error_message
from .errors import ParseError, QuotaError, RequestError, TransportError
from .factory import create_adapter
from .gemini import GeminiAdapter
from .openai import OpenAIAdapter
from .player2 import Player2Adapter

__all__ = [
    "ProviderAdapter",
    "extract_error_message",
    "create_adapter",
    "GeminiAdapter",
    "OpenAIAdapter",
    "Player2Adapter",
    "RequestError",
    "TransportError",
    "QuotaError",
    "ParseError",
]
