"""OpenAI-compatible backend using the official SDK."""

import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from ..cache.semantic import SemanticCache
from ..errors import BackendError, CacheMiss
from .base import BackendConfig, BaseBackend, InvocationMode

logger = logging.getLogger(__name__)


class OpenAIBackend(BaseBackend):
    """
    Backend for OpenAI and OpenAI-compatible endpoints.

    COMPLETION mode calls the legacy completions endpoint with the prompt
    as-is; CHAT mode sends it as a single user message, preceded by the
    configured system prompt if any. With a SemanticCache, similar prompts
    are answered from the cache without calling the model.
    """

    def __init__(
        self,
        config: BackendConfig,
        client: Optional[AsyncOpenAI] = None,
        cache: Optional[SemanticCache] = None,
    ):
        super().__init__(config)
        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )
        self.cache = cache

    async def invoke(self, prompt: str, mode: InvocationMode) -> str:
        embedding = None
        if self.cache is not None:
            try:
                result = await self.cache.get(prompt)
                return "\n".join(result.answers)
            except CacheMiss as miss:
                embedding = miss.embedding

        try:
            if mode == InvocationMode.CHAT:
                content = await self._chat(prompt)
            else:
                content = await self._complete(prompt)
        except OpenAIError as e:
            raise BackendError(f"OpenAI query failed ({self.config.model}): {e}", original=e) from e

        if self.cache is not None and embedding is not None:
            await self.cache.set(embedding, content)

        return content

    async def _complete(self, prompt: str) -> str:
        response = await self.client.completions.create(
            model=self.config.model,
            prompt=prompt,
            **self._sampling_params(),
        )
        self._log_usage(response)
        return response.choices[0].text if response.choices else ""

    async def _chat(self, prompt: str) -> str:
        messages: List[Dict[str, str]] = []
        if self.config.system_prompt:
            messages.append({"role": "system", "content": self.config.system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.config.model,
            messages=messages,
            **self._sampling_params(),
        )
        self._log_usage(response)

        content = (
            response.choices[0].message.content
            if response.choices and response.choices[0].message
            else ""
        )
        return content or ""

    def _sampling_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.config.temperature is not None:
            params["temperature"] = self.config.temperature
        if self.config.max_tokens is not None:
            params["max_tokens"] = self.config.max_tokens
        if self.config.stop:
            params["stop"] = self.config.stop
        return params

    def _log_usage(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage:
            logger.debug(
                f"{self.config.model} tokens: "
                f"input={getattr(usage, 'prompt_tokens', 0)} "
                f"output={getattr(usage, 'completion_tokens', 0)} "
                f"total={getattr(usage, 'total_tokens', 0)}"
            )
