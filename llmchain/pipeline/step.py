"""A single prompt -> invoke -> decode -> store unit of a pipeline."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel

from ..decoders.base import BaseDecoder
from ..decoders.passthrough import PassthroughDecoder
from ..decoders.targets import DecodeTarget
from ..errors import BackendError, ConfigurationError, DecodeError, MemoryStoreError, ResolveError
from ..memory.base import BaseMemory
from ..prompt.template import PromptTemplate
from ..providers.base import BaseBackend, InvocationMode

logger = logging.getLogger(__name__)

# Field of every memory entry holding the raw model text
OUTPUT_KEY = "output"
# Field holding a decoded value that is not record-shaped
VALUE_KEY = "value"


class StepState(str, Enum):
    """Execution state of a step within one run."""

    PENDING = "pending"
    RESOLVED = "resolved"
    INVOKED = "invoked"
    DECODED = "decoded"
    STORED = "stored"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one successful step execution."""

    name: str
    output: str
    value: Any
    entry: Dict[str, Any] = field(default_factory=dict)


def build_entry(raw: str, value: Any) -> Dict[str, Any]:
    """
    Memory entry for a step: the raw text under "output" plus the decoded
    value. Record-shaped values are flattened into the entry; other values
    that differ from the raw text go under "value". The raw text always
    wins over a decoded field named "output".
    """
    entry: Dict[str, Any] = {}
    if isinstance(value, BaseModel):
        entry.update(value.model_dump())
    elif isinstance(value, Mapping):
        entry.update(value)
    elif not (isinstance(value, str) and value == raw):
        entry[VALUE_KEY] = value
    entry[OUTPUT_KEY] = raw
    return entry


class Step:
    """
    Binds a name, a model backend, an invocation mode, a prompt template,
    a decoder and a destination shape.

    A step runs at most once per pipeline run and writes exactly one memory
    entry, under its own name. It never retries; errors are tagged with the
    step name and re-raised.
    """

    def __init__(
        self,
        name: str,
        backend: BaseBackend,
        mode: Union[InvocationMode, str],
        prompt: Union[PromptTemplate, str],
        decoder: Optional[BaseDecoder] = None,
        target: Optional[DecodeTarget] = None,
    ):
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("Step name must be a non-empty string")

        try:
            mode = InvocationMode(mode)
        except ValueError as e:
            raise ConfigurationError(f"Unknown invocation mode: {mode}", step=name) from e

        decoder = decoder or PassthroughDecoder()
        if target is None:
            target = decoder.default_target()
        if target is None:
            raise ConfigurationError(
                f"Decoder '{decoder.name}' needs an explicit destination shape", step=name
            )
        if not decoder.accepts(target):
            raise ConfigurationError(
                f"Decoder '{decoder.name}' cannot fill a {target.kind} destination", step=name
            )

        self.name = name
        self.backend = backend
        self.mode = mode
        self.prompt = prompt if isinstance(prompt, PromptTemplate) else PromptTemplate(prompt)
        self.decoder = decoder
        self.target = target
        self.state = StepState.PENDING

    async def execute(
        self, memory: BaseMemory, inputs: Optional[Mapping[str, Any]] = None
    ) -> StepResult:
        """
        Run the step once against the shared memory.

        Args:
            memory: Store shared by the pipeline's steps
            inputs: Run-time bindings for bare template references

        Returns:
            StepResult with raw output, decoded value and the stored entry

        Raises:
            ResolveError: If the prompt cannot be rendered
            BackendError: If the backend fails
            DecodeError: If the output cannot be decoded
            MemoryStoreError: If the memory store rejects the entry
        """
        self.state = StepState.PENDING

        try:
            prompt = self.prompt.render(memory, inputs)
        except ResolveError as e:
            self._fail(e)
            raise e.with_step(self.name)
        self._advance(StepState.RESOLVED)

        try:
            raw = await self.backend.invoke(prompt, self.mode)
        except BackendError as e:
            self._fail(e)
            raise e.with_step(self.name)
        except Exception as e:
            self._fail(e)
            raise BackendError(f"Backend failed: {e}", step=self.name, original=e) from e

        if not isinstance(raw, str):
            error = BackendError(
                f"Backend returned {type(raw).__name__} instead of text", step=self.name
            )
            self._fail(error)
            raise error
        self._advance(StepState.INVOKED)

        try:
            value = self.decoder.decode(raw, self.target)
        except DecodeError as e:
            self._fail(e)
            raise e.with_step(self.name)
        self._advance(StepState.DECODED)

        entry = build_entry(raw, value)
        try:
            memory.put(self.name, entry)
        except Exception as e:
            self._fail(e)
            raise MemoryStoreError(
                f"Could not store entry: {e}", step=self.name, original=e
            ) from e
        self._advance(StepState.STORED)

        return StepResult(name=self.name, output=raw, value=value, entry=entry)

    def _advance(self, state: StepState) -> None:
        self.state = state
        logger.debug(f"Step {self.name}: {state.value}")

    def _fail(self, error: BaseException) -> None:
        self.state = StepState.FAILED
        logger.error(f"Step {self.name} failed: {error}")

    def __repr__(self) -> str:
        return (
            f"Step(name={self.name!r}, backend={self.backend!r}, mode={self.mode.value}, "
            f"decoder={self.decoder!r})"
        )
