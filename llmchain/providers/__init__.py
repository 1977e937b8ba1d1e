"""Model backends: the capability that turns a prompt into raw text."""

from .base import BackendConfig, BaseBackend, InvocationMode
from .mock import MockBackend
from .ollama import OllamaBackend
from .openai_backend import OpenAIBackend
from .registry import BackendRegistry

__all__ = [
    "BackendConfig",
    "BaseBackend",
    "InvocationMode",
    "MockBackend",
    "OllamaBackend",
    "OpenAIBackend",
    "BackendRegistry",
]
