"""Base abstract class for model backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..config import DEFAULT_TIMEOUT


class InvocationMode(str, Enum):
    """How a backend should treat the prompt. Only backends interpret it."""

    COMPLETION = "completion"
    CHAT = "chat"


@dataclass
class BackendConfig:
    """Configuration for a model backend."""

    provider: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stop: List[str] = field(default_factory=list)
    timeout: float = DEFAULT_TIMEOUT
    system_prompt: Optional[str] = None


class BaseBackend(ABC):
    """
    Abstract base class for model backends.

    A backend turns one rendered prompt into raw text. It owns everything
    network related (timeouts, caching); the pipeline only forwards the
    prompt and the invocation mode and never retries.
    """

    requires_api_key = True

    def __init__(self, config: BackendConfig):
        self.config = config

    @abstractmethod
    async def invoke(self, prompt: str, mode: InvocationMode) -> str:
        """
        Invoke the model.

        Args:
            prompt: Rendered prompt text
            mode: Invocation mode

        Returns:
            Raw text output

        Raises:
            BackendError: If the model call fails
        """
        pass

    def validate_key(self) -> bool:
        """
        Validate that the API key is configured.

        Returns:
            True if valid, False otherwise
        """
        if not self.requires_api_key:
            return True
        return self.config.api_key is not None and len(self.config.api_key) > 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.config.model})"
