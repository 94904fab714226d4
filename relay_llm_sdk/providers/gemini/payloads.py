from typing import Any, Dict, List, Optional

from ...core.capabilities import ModelQuirks
from ...models.conversation_types import TurnRole
from ...models.generation import GenerationParams, GenerationRequest
from ..base import fold_instruction

_ROLE_MAP = {
    TurnRole.USER: "user",
    TurnRole.ASSISTANT: "model",
}


def build_contents(
    request: GenerationRequest,
    quirks: ModelQuirks,
) -> Dict[str, Any]:
    """Build ``systemInstruction`` and ``contents`` for a Gemini request.

    Gemini has no system role inside ``contents``, so system turns are merged
    into the system instruction. Models without a system field get the
    instruction as a leading user turn instead.
    """
    system_parts: List[str] = [request.instruction] if request.instruction else []
    contents: List[Dict[str, Any]] = []
    for turn in request.turns:
        if turn.role == TurnRole.SYSTEM:
            system_parts.append(turn.content)
            continue
        contents.append({"role": _ROLE_MAP[turn.role], "parts": [{"text": turn.content}]})

    instruction = "\n".join(part for part in system_parts if part)
    result: Dict[str, Any] = {}
    if instruction:
        if quirks.folds_instruction_into_user:
            contents.insert(0, {"role": "user", "parts": [{"text": fold_instruction(instruction)}]})
        else:
            result["systemInstruction"] = {"parts": [{"text": instruction}]}
    result["contents"] = contents
    return result


def build_generation_config(params: GenerationParams, quirks: ModelQuirks) -> Dict[str, Any]:
    """Map generation options to ``generationConfig`` (unset options are omitted)."""
    config: Dict[str, Any] = {}
    if params.temperature is not None:
        config["temperature"] = params.temperature
    if params.top_p is not None:
        config["topP"] = params.top_p
    if params.max_tokens is not None:
        config["maxOutputTokens"] = params.max_tokens

    thinking_budget: Optional[int] = 0 if quirks.disables_thinking else params.thinking_budget
    if thinking_budget is not None:
        config["thinkingConfig"] = {"thinkingBudget": thinking_budget}
    return config


def build_gemini_payload(request: GenerationRequest, quirks: ModelQuirks) -> Dict[str, Any]:
    payload = build_contents(request, quirks)
    generation_config = build_generation_config(request.params, quirks)
    if generation_config:
        payload["generationConfig"] = generation_config
    return payload
