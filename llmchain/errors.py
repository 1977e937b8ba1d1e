"""Error taxonomy for pipeline runs.

Every error raised by the engine derives from LLMChainError. Errors raised
while a step executes are tagged with that step's name before they reach the
caller, so the first failure of a run can be reported verbatim.
"""

from enum import Enum
from typing import List, Optional


class LLMChainError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step

    def with_step(self, step: str) -> "LLMChainError":
        """Tag the error with the name of the step that raised it."""
        self.step = step
        return self

    def __str__(self) -> str:
        if self.step:
            return f"[step {self.step}] {self.message}"
        return self.message


class ConfigurationError(LLMChainError):
    """Invalid pipeline, step, backend or definition-file configuration."""


class ResolveReason(str, Enum):
    """Why a prompt template could not be rendered."""

    MISSING_BINDING = "missing_binding"
    MALFORMED_TEMPLATE = "malformed_template"


class ResolveError(LLMChainError):
    """A template could not be rendered."""

    def __init__(
        self,
        message: str,
        reason: ResolveReason = ResolveReason.MISSING_BINDING,
        reference: Optional[str] = None,
        step: Optional[str] = None,
    ):
        super().__init__(message, step=step)
        self.reason = reason
        self.reference = reference


class DecodeErrorKind(str, Enum):
    """Why raw model output could not be shaped into a destination."""

    MALFORMED = "malformed"
    SCHEMA_MISMATCH = "schema_mismatch"
    NO_MATCH = "no_match"
    INVALID_PATTERN = "invalid_pattern"


class DecodeError(LLMChainError):
    """Raw model output could not be decoded."""

    def __init__(self, message: str, kind: DecodeErrorKind, step: Optional[str] = None):
        super().__init__(message, step=step)
        self.kind = kind


class BackendError(LLMChainError):
    """A model backend failed. The original exception is kept as __cause__."""

    def __init__(self, message: str, step: Optional[str] = None, original: Optional[BaseException] = None):
        super().__init__(message, step=step)
        self.original = original


class CacheMiss(LLMChainError):
    """No cached answer scored above the similarity threshold.

    Carries the query embedding so the caller can store the fresh answer
    without embedding the query twice.
    """

    def __init__(self, message: str = "cache miss", embedding: Optional[List[float]] = None):
        super().__init__(message)
        self.embedding = embedding


class MemoryStoreError(LLMChainError):
    """The memory store rejected a step's entry. The original exception is kept as __cause__."""

    def __init__(self, message: str, step: Optional[str] = None, original: Optional[BaseException] = None):
        super().__init__(message, step=step)
        self.original = original
