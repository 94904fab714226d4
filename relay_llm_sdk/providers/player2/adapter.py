import os
from typing import Dict, Optional

from ...config.constants import DEFAULT_PLAYER2_CLIENT_ID, PLAYER2_CLIENT_ID_ENV_VAR
from ...config.settings import ProviderConfig
from ..openai.adapter import OpenAIAdapter


class Player2Adapter(OpenAIAdapter):
    """
    Player2 chat completions.

    OpenAI dialect without a model field; the calling application identifies
    itself through ``X-Game-Client-Id``. Failures can arrive as ``error``
    objects inside an otherwise successful stream.
    """

    include_model = False
    quota_markers = ("ResourceExhausted", "Insufficient")

    def __init__(self, config: ProviderConfig, client_id: Optional[str] = None):
        super().__init__(config)
        self.client_id = client_id or os.getenv(PLAYER2_CLIENT_ID_ENV_VAR, DEFAULT_PLAYER2_CLIENT_ID)

    def headers(self) -> Dict[str, str]:
        headers = {"X-Game-Client-Id": self.client_id}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return self._merge_headers(headers)
