"""Public client API."""

from .chat import ChatClient
from .client import RelayLLMClient

__all__ = ["ChatClient", "RelayLLMClient"]
