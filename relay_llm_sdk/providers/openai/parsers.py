from __future__ import annotations

import json
from typing import Any, Optional

from ...models.generation import ParsedResponse, ResponseFragment
from ..base import extract_error_message
from ..errors import ParseError


def _first_choice(data: Any) -> Optional[dict]:
    choices = data.get("choices") if isinstance(data, dict) else None
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return None


def extract_total_tokens(data: Any) -> Optional[int]:
    usage = data.get("usage") if isinstance(data, dict) else None
    if not isinstance(usage, dict):
        return None
    total = usage.get("total_tokens")
    return total if isinstance(total, int) else None


def parse_chat_response(text: str) -> ParsedResponse:
    """Parse a chat completions response body."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"Invalid JSON in response: {e}")

    if not isinstance(data, dict):
        raise ParseError("Unexpected response shape: expected a JSON object")
    choice = _first_choice(data)
    if choice is None:
        message = extract_error_message(text) or "Response contained no choices"
        raise ParseError(message)

    message = choice.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return ParsedResponse(
        text=content if isinstance(content, str) else None,
        token_count=extract_total_tokens(data) or 0,
        finish_reason=choice.get("finish_reason"),
    )


def parse_chat_chunk(value: Any) -> ResponseFragment:
    """Parse one streamed ``chat.completion.chunk`` value.

    The final chunk requested through ``stream_options.include_usage`` has
    no choices and only carries usage.
    """
    if not isinstance(value, dict):
        return ResponseFragment()

    error = value.get("error")
    if error is not None:
        message = error.get("message") if isinstance(error, dict) else error
        return ResponseFragment(error=str(message) if message else "Unknown stream error")

    text = ""
    finish_reason = None
    choice = _first_choice(value)
    if choice is not None:
        delta = choice.get("delta")
        content = delta.get("content") if isinstance(delta, dict) else None
        if isinstance(content, str):
            text = content
        finish_reason = choice.get("finish_reason")

    return ResponseFragment(
        text=text,
        token_count=extract_total_tokens(value),
        finish_reason=finish_reason,
    )
