"""Capability registry: per-model request quirks."""

from .models import DEFAULT_QUIRKS, MODEL_QUIRKS, ModelQuirks, get_model_quirks

__all__ = [
    "DEFAULT_QUIRKS",
    "MODEL_QUIRKS",
    "ModelQuirks",
    "get_model_quirks",
]
