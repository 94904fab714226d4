from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .conversation_types import ConversationTurn


class ProviderType(str, Enum):
    """Supported chat completion backends."""
    GOOGLE = "google"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    GROK = "grok"
    GLM = "glm"
    OPENROUTER = "openrouter"
    PLAYER2 = "player2"
    LOCAL = "local"
    CUSTOM = "custom"


class GenerationParams(BaseModel):
    """
    Normalized generation options for all providers.

    Every option is optional; adapters only put the options that were set on
    the wire, using each dialect's own field names.
    """
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: Optional[float] = Field(None, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    frequency_penalty: Optional[float] = Field(None, ge=-2.0, le=2.0, description="Frequency penalty")
    presence_penalty: Optional[float] = Field(None, ge=-2.0, le=2.0, description="Presence penalty")
    max_tokens: Optional[int] = Field(None, ge=1, description="Maximum tokens to generate")
    thinking_budget: Optional[int] = Field(None, ge=0, description="Reasoning token budget (Gemini)")

    @field_validator('max_tokens')
    def validate_max_tokens(cls, v):
        if v is None:
            return v
        return min(v, 65536)


class GenerationRequest(BaseModel):
    """A single chat completion request, frozen once built."""
    model_config = ConfigDict(frozen=True)

    instruction: Optional[str] = None
    turns: List[ConversationTurn] = Field(default_factory=list)
    model: Optional[str] = None
    params: GenerationParams = Field(default_factory=GenerationParams)


class ResponseFragment(BaseModel):
    """One incrementally delivered piece of a streaming response."""
    text: str = ""
    token_count: Optional[int] = None
    finish_reason: Optional[str] = None
    error: Optional[str] = None


class ParsedResponse(BaseModel):
    """Result of parsing a complete (non-streaming) provider response."""
    text: Optional[str] = None
    token_count: int = 0
    finish_reason: Optional[str] = None
