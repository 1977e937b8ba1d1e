"""llmchain: ordered pipelines of model calls sharing one memory store."""

from .decoders import JSONDecoder, PassthroughDecoder, Record, RegexDecoder, Scalar, Sequence
from .errors import (
    BackendError,
    ConfigurationError,
    DecodeError,
    DecodeErrorKind,
    LLMChainError,
    MemoryStoreError,
    ResolveError,
    ResolveReason,
)
from .memory import RamMemory, RedisMemory
from .pipeline import Pipeline, Step, StepState
from .prompt import INPUT_KEY, PromptTemplate
from .providers import BackendConfig, InvocationMode, MockBackend, OllamaBackend, OpenAIBackend

__version__ = "0.1.0"

__all__ = [
    "BackendConfig",
    "BackendError",
    "ConfigurationError",
    "DecodeError",
    "DecodeErrorKind",
    "INPUT_KEY",
    "InvocationMode",
    "JSONDecoder",
    "LLMChainError",
    "MemoryStoreError",
    "MockBackend",
    "OllamaBackend",
    "OpenAIBackend",
    "PassthroughDecoder",
    "Pipeline",
    "PromptTemplate",
    "RamMemory",
    "Record",
    "RedisMemory",
    "RegexDecoder",
    "ResolveError",
    "ResolveReason",
    "Scalar",
    "Sequence",
    "Step",
    "StepState",
]
