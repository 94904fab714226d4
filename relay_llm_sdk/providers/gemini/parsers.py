from __future__ import annotations

import json
from typing import Any, Optional

from ...models.generation import ParsedResponse, ResponseFragment
from ..base import extract_error_message
from ..errors import ParseError


def extract_candidate_text(data: Any) -> Optional[str]:
    """Join the text parts of the first candidate; None if it has none."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(parts, list):
        return None
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    return "".join(texts) if texts else None


def extract_finish_reason(data: Any) -> Optional[str]:
    try:
        reason = data["candidates"][0].get("finishReason")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return reason if isinstance(reason, str) else None


def extract_token_count(data: Any) -> Optional[int]:
    usage = data.get("usageMetadata") if isinstance(data, dict) else None
    if not isinstance(usage, dict):
        return None
    total = usage.get("totalTokenCount")
    return total if isinstance(total, int) else None


def parse_gemini_response(text: str) -> ParsedResponse:
    """Parse a ``generateContent`` response body."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"Invalid JSON in response: {e}")

    if not isinstance(data, dict):
        raise ParseError("Unexpected response shape: expected a JSON object")
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        message = extract_error_message(text) or "Response contained no candidates"
        raise ParseError(message)

    return ParsedResponse(
        text=extract_candidate_text(data),
        token_count=extract_token_count(data) or 0,
        finish_reason=extract_finish_reason(data),
    )


def parse_gemini_chunk(value: Any) -> ResponseFragment:
    """Parse one streamed ``GenerateContentResponse`` value."""
    if not isinstance(value, dict):
        return ResponseFragment()

    error = value.get("error")
    if error is not None:
        message = error.get("message") if isinstance(error, dict) else error
        return ResponseFragment(error=str(message) if message else "Unknown stream error")

    return ResponseFragment(
        text=extract_candidate_text(value) or "",
        token_count=extract_token_count(value),
        finish_reason=extract_finish_reason(value),
    )
