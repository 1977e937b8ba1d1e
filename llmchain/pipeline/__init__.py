"""Pipeline engine for chaining model calls.

This module provides a pipeline abstraction where:
- Each Step renders a prompt, invokes a backend, decodes and stores output
- Steps run strictly in order and share one memory store
- Later templates reference earlier results by step name
- Async execution is supported throughout
"""

from .base import Pipeline
from .step import OUTPUT_KEY, VALUE_KEY, Step, StepResult, StepState, build_entry

__all__ = [
    "Pipeline",
    "Step",
    "StepResult",
    "StepState",
    "OUTPUT_KEY",
    "VALUE_KEY",
    "build_entry",
]
