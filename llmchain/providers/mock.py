"""Deterministic backend returning canned text."""

from typing import Callable, List, Sequence, Tuple, Union

from ..errors import ConfigurationError
from .base import BackendConfig, BaseBackend, InvocationMode

Responder = Callable[[str, InvocationMode], str]


class MockBackend(BaseBackend):
    """
    Backend for tests and demos.

    responses may be a single string (always returned), a sequence of
    strings (returned in order, cycling), or a callable of (prompt, mode).
    Every call is recorded in `calls`.
    """

    requires_api_key = False

    def __init__(
        self,
        responses: Union[str, Sequence[str], Responder],
        config: BackendConfig | None = None,
    ):
        super().__init__(config or BackendConfig(provider="mock", model="mock"))
        if isinstance(responses, str):
            responses = [responses]
        if not callable(responses) and len(responses) == 0:
            raise ConfigurationError("MockBackend needs at least one response")
        self.responses = responses if callable(responses) else list(responses)
        self.calls: List[Tuple[str, InvocationMode]] = []

    async def invoke(self, prompt: str, mode: InvocationMode) -> str:
        self.calls.append((prompt, mode))
        if callable(self.responses):
            return self.responses(prompt, mode)
        return self.responses[(len(self.calls) - 1) % len(self.responses)]

    @property
    def prompts(self) -> List[str]:
        return [prompt for prompt, _ in self.calls]
