"""Ordered runner for pipeline steps sharing one memory store."""

import logging
import time
from typing import Any, Iterable, List, Mapping, Optional

from ..errors import ConfigurationError
from ..memory.base import BaseMemory
from ..memory.ram import RamMemory
from ..prompt.template import INPUT_KEY
from .step import Step

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, Mapping, list, tuple)):
        return len(value) == 0
    return False


class Pipeline:
    """
    Chain of steps with strictly sequential execution.

    Every run writes into one memory store, the pipeline's own unless the
    caller passes another. The first failing step aborts the run: no later
    step executes and entries already written stay in the store. Steps are
    not transactional, so nothing is rolled back.

    Reusing a store across runs overwrites entries of the same name; keeping
    names unique across a logical run is the caller's responsibility.
    """

    def __init__(self, steps: Iterable[Step], memory: Optional[BaseMemory] = None):
        self.steps: List[Step] = list(steps)
        if not self.steps:
            raise ConfigurationError("A pipeline needs at least one step")

        seen = set()
        for step in self.steps:
            if step.name in seen:
                raise ConfigurationError(f"Duplicate step name: {step.name}")
            seen.add(step.name)

        self.memory = memory if memory is not None else RamMemory()

    async def run(self, initial_input: Any = None, memory: Optional[BaseMemory] = None) -> Any:
        """
        Execute every step in order.

        Args:
            initial_input: External input, bound under "input" for the first
                step only. Each later step sees the previous step's entry
                as its bare bindings.
            memory: Store to use for this run instead of the pipeline's own

        Returns:
            The decoded value of the last step

        Raises:
            LLMChainError: The first step failure, tagged with the step name
        """
        store = memory if memory is not None else self.memory
        inputs: Mapping[str, Any] = {} if _is_empty(initial_input) else {INPUT_KEY: initial_input}

        logger.info(f"Pipeline run started: {self.step_names}")
        started = time.monotonic()

        result = None
        for step in self.steps:
            result = await step.execute(store, inputs)
            inputs = result.entry

        logger.info(
            f"Pipeline run finished: {len(self.steps)} steps in {time.monotonic() - started:.2f}s"
        )
        return result.value

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def with_step(self, step: Step) -> "Pipeline":
        """
        Return new pipeline with step appended.

        Creates a new pipeline sharing the same memory store, leaves the
        original unchanged.
        """
        return Pipeline(self.steps + [step], memory=self.memory)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"Pipeline(steps={self.step_names})"
