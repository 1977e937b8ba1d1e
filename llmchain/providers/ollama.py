"""Ollama backend for local model inference."""

from typing import Any, Dict

import httpx

from ..errors import BackendError
from .base import BackendConfig, BaseBackend, InvocationMode

DEFAULT_OLLAMA_URL = "http://localhost:11434"


class OllamaBackend(BaseBackend):
    """Ollama backend for local open-source models."""

    requires_api_key = False

    def __init__(self, config: BackendConfig):
        super().__init__(config)
        self.base_url = (config.base_url or DEFAULT_OLLAMA_URL).rstrip("/")

    async def invoke(self, prompt: str, mode: InvocationMode) -> str:
        """
        Query the local Ollama server.

        COMPLETION mode uses /api/generate, CHAT mode uses /api/chat.
        """
        if mode == InvocationMode.CHAT:
            url = f"{self.base_url}/api/chat"
            messages = []
            if self.config.system_prompt:
                messages.append({"role": "system", "content": self.config.system_prompt})
            messages.append({"role": "user", "content": prompt})
            payload: Dict[str, Any] = {"model": self.config.model, "messages": messages}
        else:
            url = f"{self.base_url}/api/generate"
            payload = {"model": self.config.model, "prompt": prompt}
            if self.config.system_prompt:
                payload["system"] = self.config.system_prompt

        payload["stream"] = False

        options = self._options()
        if options:
            payload["options"] = options

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"Ollama HTTP error: {e.response.status_code} - {e.response.text}",
                original=e,
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"Ollama query failed: {e}", original=e) from e

        if mode == InvocationMode.CHAT:
            return data.get("message", {}).get("content", "")
        return data.get("response", "")

    def _options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if self.config.temperature is not None:
            options["temperature"] = self.config.temperature
        if self.config.max_tokens is not None:
            options["num_predict"] = self.config.max_tokens
        if self.config.stop:
            options["stop"] = self.config.stop
        return options
