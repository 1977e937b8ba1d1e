"""Backend registry for building backends from configuration."""

import logging
import os
from typing import Any, Dict, Mapping, Optional, Type

import yaml

from ..config import DEFAULT_MODEL, DEFAULT_TIMEOUT, OLLAMA_BASE_URL
from ..errors import ConfigurationError
from .base import BackendConfig, BaseBackend
from .mock import MockBackend
from .ollama import OllamaBackend
from .openai_backend import OpenAIBackend

logger = logging.getLogger(__name__)

PROVIDER_MAP: Dict[str, Type[BaseBackend]] = {
    "openai": OpenAIBackend,
    "ollama": OllamaBackend,
    "mock": MockBackend,
}

DEFAULT_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
}


class BackendRegistry:
    """Registry of named model backends shared by pipeline steps."""

    def __init__(self):
        self._backends: Dict[str, BaseBackend] = {}
        self._backend_configs: Dict[str, BackendConfig] = {}

    def register(self, name: str, backend: BaseBackend) -> None:
        """Register an already built backend under a name."""
        self._backends[name] = backend
        self._backend_configs[name] = backend.config

    def load_backends(self, config_path: str) -> None:
        """
        Load backend definitions from a YAML file.

        Args:
            config_path: Path to a YAML mapping of backend name -> settings
        """
        with open(config_path, "r") as f:
            configs = yaml.safe_load(f) or {}

        if not isinstance(configs, Mapping):
            raise ConfigurationError(f"{config_path}: expected a mapping of backends")
        self.load_mapping(configs)

    def load_mapping(self, configs: Mapping[str, Mapping[str, Any]]) -> None:
        """
        Load backend definitions from a mapping.

        Each entry supports: provider, model, api_key_env, base_url,
        temperature, max_tokens, stop, timeout, system_prompt, and
        responses (mock provider only). Backends whose API key is missing
        are skipped with a warning.
        """
        for name, config_data in configs.items():
            if not isinstance(config_data, Mapping):
                raise ConfigurationError(f"Backend '{name}': expected a mapping")

            provider_id = config_data.get("provider", "openai")
            provider_class = PROVIDER_MAP.get(provider_id)
            if provider_class is None:
                raise ConfigurationError(f"Backend '{name}': unknown provider '{provider_id}'")

            config = self._build_config(provider_id, config_data)
            self._backend_configs[name] = config

            if provider_class.requires_api_key and not config.api_key:
                logger.warning(f"Backend {name} ({provider_id}) has no API key (skipping)")
                continue

            if provider_class is MockBackend:
                backend: BaseBackend = MockBackend(config_data.get("responses", ""), config=config)
            else:
                backend = provider_class(config)

            self._backends[name] = backend
            logger.info(f"Loaded backend: {name} ({provider_id}:{config.model})")

    def _build_config(self, provider_id: str, config_data: Mapping[str, Any]) -> BackendConfig:
        api_key_env = config_data.get("api_key_env", DEFAULT_API_KEY_ENV.get(provider_id, ""))
        base_url = config_data.get("base_url")
        if base_url is None and provider_id == "ollama":
            base_url = OLLAMA_BASE_URL

        stop = config_data.get("stop") or []
        if isinstance(stop, str):
            stop = [stop]

        return BackendConfig(
            provider=provider_id,
            model=config_data.get("model", DEFAULT_MODEL),
            api_key=os.getenv(api_key_env) if api_key_env else None,
            base_url=base_url,
            temperature=config_data.get("temperature"),
            max_tokens=config_data.get("max_tokens"),
            stop=list(stop),
            timeout=float(config_data.get("timeout", DEFAULT_TIMEOUT)),
            system_prompt=config_data.get("system_prompt"),
        )

    def get(self, name: str) -> BaseBackend:
        """
        Get backend instance by name.

        Raises:
            ConfigurationError: If no backend with that name was loaded
        """
        backend = self._backends.get(name)
        if backend is None:
            if name in self._backend_configs:
                raise ConfigurationError(f"Backend '{name}' is configured but was not loaded")
            raise ConfigurationError(f"Unknown backend: {name}")
        return backend

    def get_config(self, name: str) -> Optional[BackendConfig]:
        return self._backend_configs.get(name)

    def get_all_backends(self) -> Dict[str, BaseBackend]:
        """Get all loaded backends."""
        return self._backends.copy()

    def __contains__(self, name: object) -> bool:
        return name in self._backends

    def __len__(self) -> int:
        return len(self._backends)
