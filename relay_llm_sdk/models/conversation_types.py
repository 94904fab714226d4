from enum import Enum

from pydantic import BaseModel, ConfigDict


class TurnRole(str, Enum):
    """Conversation turn roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """One role-tagged message of a conversation."""
    model_config = ConfigDict(frozen=True)

    role: TurnRole
    content: str
