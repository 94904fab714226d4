from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from ...config.endpoints import OPENAI_CHAT_PATH
from ...core.capabilities import ModelQuirks
from ...models.generation import GenerationParams, GenerationRequest
from ..base import fold_instruction


def normalize_endpoint(base_url: Optional[str]) -> Optional[str]:
    """Turn a configured base URL into the chat completions endpoint.

    A bare host (no path) gets ``/v1/chat/completions`` appended; a URL that
    already has a path is used as-is.
    """
    if not base_url or not base_url.strip():
        return None
    trimmed = base_url.strip().rstrip("/")
    parts = urlsplit(trimmed)
    if not parts.scheme or not parts.netloc:
        return None
    if not parts.path.strip("/"):
        return trimmed + OPENAI_CHAT_PATH
    return trimmed


def build_messages(request: GenerationRequest, quirks: ModelQuirks) -> List[Dict[str, str]]:
    """Build the ``messages`` list; the instruction becomes the system message."""
    messages = [{"role": turn.role.value, "content": turn.content} for turn in request.turns]
    if request.instruction:
        if quirks.folds_instruction_into_user:
            messages.insert(0, {"role": "user", "content": fold_instruction(request.instruction)})
        else:
            messages.insert(0, {"role": "system", "content": request.instruction})
    return messages


def apply_generation_params(payload: Dict[str, Any], params: GenerationParams) -> Dict[str, Any]:
    """Copy the options that were set, under their chat completions names."""
    for key in ("temperature", "top_p", "frequency_penalty", "presence_penalty", "max_tokens"):
        value = getattr(params, key)
        if value is not None:
            payload[key] = value
    return payload


def build_chat_payload(
    request: GenerationRequest,
    quirks: ModelQuirks,
    stream: bool,
    include_model: bool = True,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if include_model and request.model:
        payload["model"] = request.model
    payload["messages"] = build_messages(request, quirks)
    apply_generation_params(payload, request.params)
    if stream:
        payload["stream"] = True
        payload["stream_options"] = {"include_usage": True}
    return payload
