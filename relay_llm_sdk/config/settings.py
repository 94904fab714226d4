"""
Provider configuration and rotation policy.

The settings object is the configuration collaborator of the SDK: the clients
read the active configuration fresh on every call, and the failover
orchestrator asks it for a distinct next candidate after a failure.
Rotation state (cloud index, fallback flag) is guarded by a lock so that
concurrent calls do not interleave their read-modify-write sequences.
"""

import json
import os
import threading
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, PrivateAttr

from ..models.generation import ProviderType


class ProviderConfig(BaseModel):
    """Connection settings for one provider/model candidate."""
    provider: ProviderType
    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    enabled: bool = True


class ProviderSettings(BaseModel):
    """Active configuration plus the rotation policy used for failover."""
    cloud_configs: List[ProviderConfig] = Field(default_factory=list)
    current_cloud_config_index: int = 0
    local_config: Optional[ProviderConfig] = None
    use_cloud_providers: bool = True

    # Simple mode: one provider, with a single fallback model to switch to
    use_simple_config: bool = False
    simple_config: Optional[ProviderConfig] = None
    fallback_model: Optional[str] = None
    is_using_fallback_model: bool = False

    _lock: Any = PrivateAttr(default_factory=threading.RLock)

    def get_active_config(self) -> Optional[ProviderConfig]:
        """Return the configuration the next call should use."""
        with self._lock:
            if self.use_simple_config:
                if self.simple_config is None:
                    return None
                if self.is_using_fallback_model and self.fallback_model:
                    return self.simple_config.model_copy(update={"model": self.fallback_model})
                return self.simple_config

            if not self.use_cloud_providers:
                return self.local_config

            enabled = self._enabled_indices()
            if not enabled:
                return None
            if self.current_cloud_config_index not in enabled:
                self.current_cloud_config_index = enabled[0]
            return self.cloud_configs[self.current_cloud_config_index]

    def get_current_model(self) -> str:
        config = self.get_active_config()
        if config is None or not config.model:
            return ""
        return config.model

    def try_next_config(self) -> bool:
        """
        Advance to the next enabled cloud configuration.

        Returns:
            True if the active cloud configuration changed
        """
        with self._lock:
            enabled = self._enabled_indices()
            if not enabled:
                return False
            original = self.current_cloud_config_index
            later = [i for i in enabled if i > original]
            self.current_cloud_config_index = later[0] if later else enabled[0]
            return self.current_cloud_config_index != original

    def advance_for_retry(self) -> bool:
        """
        Switch to a different candidate after a failed call.

        Simple mode switches to the fallback model once; cloud mode rotates
        through the enabled cloud configurations; a local-only setup has no
        alternative.

        Returns:
            True if a genuinely different candidate is now active
        """
        with self._lock:
            if self.use_simple_config:
                if self.is_using_fallback_model or self.simple_config is None:
                    return False
                if not self.fallback_model or self.fallback_model == self.simple_config.model:
                    return False
                self.is_using_fallback_model = True
                return True

            if not self.use_cloud_providers:
                return False
            return self.try_next_config()

    def reset_rotation(self) -> None:
        """Go back to the first candidate (new session)."""
        with self._lock:
            self.current_cloud_config_index = 0
            self.is_using_fallback_model = False

    def _enabled_indices(self) -> List[int]:
        return [i for i, config in enumerate(self.cloud_configs) if config.enabled]

    @classmethod
    def from_env(cls) -> "ProviderSettings":
        """
        Build settings from environment variables (``.env`` is loaded first).

        ``RELAY_PROVIDER``/``RELAY_MODEL``/``RELAY_API_KEY``/``RELAY_BASE_URL``
        describe the primary candidate and the ``RELAY_FALLBACK_*`` variables
        an optional second one. A local primary provider disables cloud
        rotation.
        """
        load_dotenv()

        primary = _config_from_env("RELAY")
        if primary.provider == ProviderType.LOCAL:
            return cls(local_config=primary, use_cloud_providers=False)

        configs = [primary]
        if os.getenv("RELAY_FALLBACK_PROVIDER") or os.getenv("RELAY_FALLBACK_MODEL"):
            configs.append(_config_from_env("RELAY_FALLBACK", default=primary))
        return cls(cloud_configs=configs)


def _config_from_env(prefix: str, default: Optional[ProviderConfig] = None) -> ProviderConfig:
    provider = os.getenv(f"{prefix}_PROVIDER")
    if provider:
        provider_type = ProviderType(provider.lower())
    else:
        provider_type = default.provider if default else ProviderType.GOOGLE

    headers_raw = os.getenv(f"{prefix}_EXTRA_HEADERS")
    extra_headers = json.loads(headers_raw) if headers_raw else {}

    same_provider = default is not None and default.provider == provider_type
    return ProviderConfig(
        provider=provider_type,
        model=os.getenv(f"{prefix}_MODEL") or (default.model if same_provider else None),
        api_key=os.getenv(f"{prefix}_API_KEY") or (default.api_key if same_provider else None),
        base_url=os.getenv(f"{prefix}_BASE_URL") or (default.base_url if same_provider else None),
        extra_headers=extra_headers,
    )
