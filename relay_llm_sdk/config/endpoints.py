from typing import Dict, Optional

from ..models.generation import ProviderType

OPENAI_CHAT_PATH = "/v1/chat/completions"

# Default base URLs; local and custom providers must supply their own.
PROVIDER_BASE_URLS: Dict[ProviderType, str] = {
    ProviderType.GOOGLE: "https://generativelanguage.googleapis.com/v1beta",
    ProviderType.OPENAI: "https://api.openai.com",
    ProviderType.DEEPSEEK: "https://api.deepseek.com",
    ProviderType.GROK: "https://api.x.ai",
    ProviderType.GLM: "https://api.z.ai/api/paas/v4/chat/completions",
    ProviderType.OPENROUTER: "https://openrouter.ai/api/v1/chat/completions",
    ProviderType.PLAYER2: "https://api.player2.game",
}


def get_endpoint_url(provider: ProviderType) -> Optional[str]:
    """Return the default base URL of a provider, or None if it has none."""
    return PROVIDER_BASE_URLS.get(provider)
