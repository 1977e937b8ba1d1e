"""Tests for pipeline runs.

Covers ordering, memory sharing between steps, failure handling and the
three-step scenario: a greeting, a JSON request about the greeting, and a
regex-decoded answer referring to both earlier steps.
"""

import json

import pytest

from llmchain.decoders import JSONDecoder, Record, RegexDecoder
from llmchain.errors import ConfigurationError, DecodeError, ResolveError, ResolveReason
from llmchain.memory import RamMemory
from llmchain.pipeline import Pipeline, Step
from llmchain.prompt import PromptTemplate
from llmchain.providers import InvocationMode, MockBackend
from tests.fixtures.canned_responses import (
    SCENARIO_PATTERN,
    SCENARIO_RESPONSES,
    STEP1_TEMPLATE,
    STEP2_TEMPLATE,
    STEP3_TEMPLATE,
    scenario_responder,
)


def scenario_steps(backend):
    """The three scenario steps sharing one backend."""
    return [
        Step("step1", backend, InvocationMode.COMPLETION, STEP1_TEMPLATE),
        Step(
            "step2",
            backend,
            InvocationMode.COMPLETION,
            PromptTemplate(STEP2_TEMPLATE, {"value": "thanks"}),
            decoder=JSONDecoder(),
            target=Record.of("First", "Second"),
        ),
        Step(
            "step3",
            backend,
            InvocationMode.COMPLETION,
            PromptTemplate(STEP3_TEMPLATE, {"value": "Bye!"}),
            decoder=RegexDecoder(SCENARIO_PATTERN),
        ),
    ]


@pytest.mark.integration
class TestScenario:
    """Test suite for the three-step scenario."""

    @pytest.mark.asyncio
    async def test_final_output(self, scenario_backend):
        pipeline = Pipeline(scenario_steps(scenario_backend))

        result = await pipeline.run()

        assert result == ["glad", "tidings", "to everyone reading"]

    @pytest.mark.asyncio
    async def test_memory_holds_one_entry_per_step(self, scenario_backend):
        pipeline = Pipeline(scenario_steps(scenario_backend))

        await pipeline.run()

        entries = pipeline.memory.all()
        assert set(entries) == {"step1", "step2", "step3"}
        assert entries["step1"] == {"output": SCENARIO_RESPONSES["step1"]}
        assert entries["step2"]["First"] == "orbit"
        assert entries["step2"]["Second"] == "marmalade"
        assert entries["step3"]["value"] == ["glad", "tidings", "to everyone reading"]

    @pytest.mark.asyncio
    async def test_prompts_reference_earlier_steps(self, scenario_backend):
        pipeline = Pipeline(scenario_steps(scenario_backend))

        await pipeline.run()

        step1_output = SCENARIO_RESPONSES["step1"]
        assert scenario_backend.prompts == [
            "Hello how are you?",
            f"Your message '{step1_output}' is nonsense. Anyway I'm fine thanks!",
            "You generated first:'orbit' and second:'marmalade'. Bye! "
            f"However your first message was: '{step1_output}'",
        ]

    @pytest.mark.asyncio
    async def test_memory_dump(self, scenario_backend):
        pipeline = Pipeline(scenario_steps(scenario_backend))

        await pipeline.run()

        assert json.loads(pipeline.memory.dump()) == pipeline.memory.all()

    @pytest.mark.asyncio
    async def test_runs_are_deterministic(self):
        first = Pipeline(scenario_steps(MockBackend(scenario_responder)))
        second = Pipeline(scenario_steps(MockBackend(scenario_responder)))

        assert await first.run() == await second.run()
        assert first.memory.all() == second.memory.all()


@pytest.mark.unit
class TestPipelineRun:
    """Test suite for Pipeline.run."""

    @pytest.mark.asyncio
    async def test_steps_run_in_order(self):
        backend = MockBackend(["one", "two", "three"])
        pipeline = Pipeline(
            [Step(name, backend, InvocationMode.COMPLETION, name) for name in ("a", "b", "c")]
        )

        result = await pipeline.run()

        assert backend.prompts == ["a", "b", "c"]
        assert result == "three"

    @pytest.mark.asyncio
    async def test_result_is_last_step_value(self):
        pipeline = Pipeline(
            [
                Step("a", MockBackend("x y z"), InvocationMode.COMPLETION, "A", decoder=RegexDecoder(r"(\w+)")),
                Step("b", MockBackend("plain"), InvocationMode.COMPLETION, "B"),
            ]
        )

        assert await pipeline.run() == "plain"

    @pytest.mark.asyncio
    async def test_initial_input_bound_for_first_step(self):
        backend = MockBackend("ok")
        pipeline = Pipeline([Step("a", backend, InvocationMode.COMPLETION, "Q: {{ input }}")])

        await pipeline.run("what time is it")

        assert backend.prompts == ["Q: what time is it"]

    @pytest.mark.asyncio
    async def test_initial_input_not_visible_to_later_steps(self):
        backend = MockBackend("ok")
        pipeline = Pipeline(
            [
                Step("a", backend, InvocationMode.COMPLETION, "{{ input }}"),
                Step("b", backend, InvocationMode.COMPLETION, "{{ input }}"),
            ]
        )

        with pytest.raises(ResolveError) as exc_info:
            await pipeline.run("hello")

        assert exc_info.value.step == "b"

    @pytest.mark.asyncio
    async def test_empty_input_is_not_bound(self):
        pipeline = Pipeline([Step("a", MockBackend("ok"), InvocationMode.COMPLETION, "{{ input }}")])

        with pytest.raises(ResolveError) as exc_info:
            await pipeline.run("")

        assert exc_info.value.reason == ResolveReason.MISSING_BINDING

    @pytest.mark.asyncio
    async def test_previous_entry_is_bare_bindings(self):
        backend = MockBackend(["first answer", "second answer"])
        pipeline = Pipeline(
            [
                Step("a", backend, InvocationMode.COMPLETION, "start"),
                Step("b", backend, InvocationMode.COMPLETION, "You said {{ output }}"),
            ]
        )

        await pipeline.run()

        assert backend.prompts[1] == "You said first answer"

    @pytest.mark.asyncio
    async def test_failure_stops_run_without_rollback(self):
        later = MockBackend("never")
        pipeline = Pipeline(
            [
                Step("a", MockBackend("stored"), InvocationMode.COMPLETION, "A"),
                Step("b", MockBackend("not json"), InvocationMode.COMPLETION, "B",
                     decoder=JSONDecoder(), target=Record.of("k")),
                Step("c", later, InvocationMode.COMPLETION, "C"),
            ]
        )

        with pytest.raises(DecodeError) as exc_info:
            await pipeline.run()

        assert exc_info.value.step == "b"
        assert later.calls == []
        assert pipeline.memory.all() == {"a": {"output": "stored"}}

    @pytest.mark.asyncio
    async def test_forward_reference_is_an_error(self):
        pipeline = Pipeline(
            [
                Step("a", MockBackend("x"), InvocationMode.COMPLETION, "{{ b.output }}"),
                Step("b", MockBackend("y"), InvocationMode.COMPLETION, "B"),
            ]
        )

        with pytest.raises(ResolveError) as exc_info:
            await pipeline.run()

        assert exc_info.value.step == "a"
        assert exc_info.value.reference == "b.output"

    @pytest.mark.asyncio
    async def test_memory_override(self):
        own = RamMemory()
        other = RamMemory()
        pipeline = Pipeline([Step("a", MockBackend("x"), InvocationMode.COMPLETION, "A")], memory=own)

        await pipeline.run(memory=other)

        assert other.has("a")
        assert not own.has("a")

    @pytest.mark.asyncio
    async def test_reused_store_overwrites_entries(self):
        backend = MockBackend(["first", "second"])
        pipeline = Pipeline([Step("a", backend, InvocationMode.COMPLETION, "A")])

        await pipeline.run()
        await pipeline.run()

        assert pipeline.memory.get("a") == {"output": "second"}

    @pytest.mark.asyncio
    async def test_with_step_shares_memory(self):
        base = Pipeline([Step("a", MockBackend("x"), InvocationMode.COMPLETION, "A")])
        extended = base.with_step(Step("b", MockBackend("y"), InvocationMode.COMPLETION, "{{ a.output }}"))

        await extended.run()

        assert len(base) == 1
        assert extended.step_names == ["a", "b"]
        assert base.memory is extended.memory
        assert base.memory.get("b") == {"output": "y"}


@pytest.mark.unit
class TestPipelineConfiguration:
    """Test suite for pipeline construction checks."""

    def test_no_steps(self):
        with pytest.raises(ConfigurationError):
            Pipeline([])

    def test_duplicate_step_names(self):
        backend = MockBackend("x")

        with pytest.raises(ConfigurationError, match="Duplicate"):
            Pipeline(
                [
                    Step("a", backend, InvocationMode.COMPLETION, "A"),
                    Step("a", backend, InvocationMode.COMPLETION, "B"),
                ]
            )

    def test_default_memory_is_ram(self):
        pipeline = Pipeline([Step("a", MockBackend("x"), InvocationMode.COMPLETION, "A")])

        assert isinstance(pipeline.memory, RamMemory)
        assert repr(pipeline) == "Pipeline(steps=['a'])"
