"""
Model quirk table for capability-driven request building.

Some model families need the request shaped differently from the rest of
their provider's dialect. Instead of sprinkling model-name checks through the
adapters, each family is described once here by a pattern and a small set of
boolean quirks. Adapters resolve the quirks once per call.
"""

from functools import lru_cache
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ModelQuirks(BaseModel):
    """Request-shaping quirks of a model family."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    folds_instruction_into_user: bool = Field(
        False,
        description="No dedicated system field; instruction goes into a leading user turn",
    )
    disables_thinking: bool = Field(
        False,
        description="Thinking budget must be forced to 0",
    )


DEFAULT_QUIRKS = ModelQuirks()


# (substring of the lower-cased model name, quirks); every matching entry applies
MODEL_QUIRKS: Tuple[Tuple[str, ModelQuirks], ...] = (
    ("gemma", ModelQuirks(folds_instruction_into_user=True)),
    ("flash", ModelQuirks(disables_thinking=True)),
)


@lru_cache(maxsize=128)
def get_model_quirks(model: Optional[str]) -> ModelQuirks:
    """
    Resolve the quirks of a model from the pattern table.

    Args:
        model: Model identifier (may be None for providers without model choice)

    Returns:
        ModelQuirks with every matching pattern's flags combined
    """
    if not model:
        return DEFAULT_QUIRKS

    name = model.lower()
    folds = False
    no_thinking = False
    for pattern, quirks in MODEL_QUIRKS:
        if pattern in name:
            folds = folds or quirks.folds_instruction_into_user
            no_thinking = no_thinking or quirks.disables_thinking
    return ModelQuirks(folds_instruction_into_user=folds, disables_thinking=no_thinking)
