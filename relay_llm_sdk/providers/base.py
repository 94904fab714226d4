"""
Base Provider Adapter Interface

This module defines the abstract base class for all provider adapters.
An adapter translates between the SDK's provider-agnostic request model and
one backend's JSON dialect, in both directions:

- Building the endpoint, headers and request body
- Parsing a complete response body
- Parsing the values of a streamed response into fragments
- Extracting a readable message from an error body

Adapters should NOT contain:
- Network calls (the transport owns those)
- Retry or failover logic
- Direct model name checks (use the capability table instead)
"""

import json
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Optional, Tuple

from ..config.settings import ProviderConfig
from ..models.generation import GenerationRequest, ParsedResponse, ResponseFragment
from ..streaming import JsonStreamDecoder


class ProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    Subclasses declare their stream framing and finish-reason vocabulary as
    class attributes and implement the translation methods.
    """

    # Framing of the streaming response body ("sse", "array" or "raw")
    stream_framing: str = "sse"
    requires_api_key: bool = True
    # Finish reasons that mean "cut off at the maximum output length"
    truncation_reasons: FrozenSet[str] = frozenset()
    # Substrings marking an in-stream error message as a quota condition
    quota_markers: Tuple[str, ...] = ()

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def model(self) -> Optional[str]:
        return self.config.model

    def get_provider_name(self) -> str:
        return self.config.provider.value

    def is_available(self) -> bool:
        """
        Check if the adapter has what it needs to make a call.

        Returns:
            bool: False if a required credential is missing
        """
        return bool(self.config.api_key) or not self.requires_api_key

    @abstractmethod
    def endpoint(self, model: Optional[str], stream: bool) -> Optional[str]:
        """
        Build the request URL.

        The URL never carries the credential, so it is safe to log and to
        record in payloads.

        Returns:
            The URL, or None if no usable endpoint is configured
        """

    @abstractmethod
    def headers(self) -> Dict[str, str]:
        """Request headers, including authentication and configured extras."""

    @abstractmethod
    def build_request(self, request: GenerationRequest, stream: bool) -> Dict[str, Any]:
        """Translate a request into the provider's JSON body."""

    @abstractmethod
    def parse_full_response(self, text: str) -> ParsedResponse:
        """
        Parse a complete response body.

        Raises:
            ParseError: If the body is not JSON or has an unexpected shape
        """

    @abstractmethod
    def parse_fragment(self, value: Any) -> ResponseFragment:
        """
        Turn one decoded stream value into a fragment.

        Lenient: values of an unknown shape yield an empty fragment.
        """

    def is_truncated(self, finish_reason: Optional[str]) -> bool:
        return finish_reason is not None and finish_reason in self.truncation_reasons

    def extract_error_message(self, text: Optional[str]) -> Optional[str]:
        return extract_error_message(text)

    def is_quota_message(self, message: Optional[str]) -> bool:
        if not message:
            return False
        return any(marker in message for marker in self.quota_markers)

    def _merge_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        merged = dict(headers)
        merged.update(self.config.extra_headers)
        return merged


def extract_error_message(text: Optional[str]) -> Optional[str]:
    """
    Best-effort extraction of the message from an error body.

    Accepts ``{"error": {"message": ...}}``, ``{"error": "..."}`` and a JSON
    array whose first element holds either. Bodies that are not a single JSON
    document (an SSE stream, for example) are scanned for embedded values.

    Returns:
        The message, or None if nothing usable was found
    """
    if not text:
        return None

    try:
        candidates = [json.loads(text)]
    except json.JSONDecodeError:
        decoder = JsonStreamDecoder("raw")
        candidates = decoder.feed(text) + decoder.finish()

    for data in candidates:
        message = _error_message_of(data)
        if message:
            return message
    return None


def _error_message_of(data: Any) -> Optional[str]:
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) and message else None
    if isinstance(error, str) and error:
        return error
    return None


def fold_instruction(instruction: str) -> str:
    """
    Prefix an instruction with a random numeric token.

    Used for models without a system field, where the instruction is sent as
    the leading user turn; the token keeps identical instructions from being
    served from a response cache.
    """
    return f"{random.randint(1, 2**31 - 1)} {instruction}"
