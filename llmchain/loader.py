"""Pipeline definition files.

A definition is a YAML document with three sections: `backends` (see
BackendRegistry.load_mapping), `memory` and `steps`. It is parsed into
frozen dataclasses first, then assembled into a Pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .config import MEMORY_NAMESPACE
from .decoders import JSONDecoder, PassthroughDecoder, RegexDecoder, Record
from .decoders.base import BaseDecoder
from .decoders.targets import DecodeTarget
from .errors import ConfigurationError
from .memory import BaseMemory, RamMemory, RedisConfig, RedisMemory
from .pipeline import Pipeline, Step
from .prompt import PromptTemplate
from .providers import BackendRegistry, InvocationMode

DEFAULT_BACKEND = "default"


@dataclass(frozen=True)
class DecoderDefinition:
    type: str = "passthrough"
    pattern: Optional[str] = None
    fields: Tuple[str, ...] = ()
    defaults: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StepDefinition:
    name: str
    template: str
    backend: str = DEFAULT_BACKEND
    mode: InvocationMode = InvocationMode.COMPLETION
    bindings: Dict[str, Any] = field(default_factory=dict)
    decoder: DecoderDefinition = field(default_factory=DecoderDefinition)


@dataclass(frozen=True)
class MemoryDefinition:
    type: str = "ram"
    namespace: str = MEMORY_NAMESPACE


@dataclass(frozen=True)
class PipelineDefinition:
    steps: List[StepDefinition]
    backends: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    memory: MemoryDefinition = field(default_factory=MemoryDefinition)


def _require_mapping(data: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{where}: expected a mapping")
    return data


def _parse_fields(data: Any, where: str) -> Tuple[str, ...]:
    if data is None:
        return ()
    if isinstance(data, str):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(item, str) and item for item in data):
        raise ConfigurationError(f"{where}: expected a list of field names")
    return tuple(data)


def _parse_decoder(data: Any, where: str) -> DecoderDefinition:
    if data is None:
        return DecoderDefinition()
    if isinstance(data, str):
        data = {"type": data}
    data = _require_mapping(data, where)

    decoder_type = data.get("type", "passthrough")
    if decoder_type not in ("passthrough", "json", "regex"):
        raise ConfigurationError(f"{where}: unknown decoder type '{decoder_type}'")
    if decoder_type == "regex" and not data.get("pattern"):
        raise ConfigurationError(f"{where}: regex decoder needs a pattern")

    defaults = dict(_require_mapping(data.get("defaults") or {}, f"{where}.defaults"))
    fields = _parse_fields(data.get("fields"), f"{where}.fields")
    if decoder_type == "json" and not fields and not defaults:
        raise ConfigurationError(f"{where}: json decoder needs fields")

    return DecoderDefinition(
        type=decoder_type,
        pattern=data.get("pattern"),
        fields=fields,
        defaults=defaults,
    )


def _parse_step(data: Any, index: int) -> StepDefinition:
    where = f"steps[{index}]"
    data = _require_mapping(data, where)

    for key in ("name", "template"):
        if not data.get(key):
            raise ConfigurationError(f"{where}: missing '{key}'")

    try:
        mode = InvocationMode(data.get("mode", InvocationMode.COMPLETION.value))
    except ValueError as e:
        raise ConfigurationError(f"{where}: unknown mode '{data.get('mode')}'") from e

    return StepDefinition(
        name=str(data["name"]),
        template=str(data["template"]),
        backend=data.get("backend", DEFAULT_BACKEND),
        mode=mode,
        bindings=dict(_require_mapping(data.get("bindings") or {}, f"{where}.bindings")),
        decoder=_parse_decoder(data.get("decoder"), f"{where}.decoder"),
    )


def _parse_memory(data: Any) -> MemoryDefinition:
    if data is None:
        return MemoryDefinition()
    data = _require_mapping(data, "memory")

    memory_type = data.get("type", "ram")
    if memory_type not in ("ram", "redis"):
        raise ConfigurationError(f"memory: unknown type '{memory_type}'")
    return MemoryDefinition(type=memory_type, namespace=data.get("namespace", MEMORY_NAMESPACE))


def parse_definition(data: Any) -> PipelineDefinition:
    """Parse an already loaded YAML document."""
    data = _require_mapping(data, "pipeline definition")

    steps = data.get("steps")
    if not isinstance(steps, list) or not steps:
        raise ConfigurationError("pipeline definition: 'steps' must be a non-empty list")

    backends = _require_mapping(data.get("backends") or {}, "backends")

    return PipelineDefinition(
        steps=[_parse_step(item, index) for index, item in enumerate(steps)],
        backends={name: dict(_require_mapping(cfg, f"backends.{name}")) for name, cfg in backends.items()},
        memory=_parse_memory(data.get("memory")),
    )


def load_definition(path: str) -> PipelineDefinition:
    """Load and parse a pipeline definition file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: invalid YAML: {e}") from e
    return parse_definition(data)


def build_decoder(definition: DecoderDefinition, step_name: str) -> Tuple[BaseDecoder, Optional[DecodeTarget]]:
    if definition.type == "json":
        try:
            target = Record.of(
                *definition.fields, defaults=definition.defaults, model_name=f"{step_name}_record"
            )
        except ConfigurationError as e:
            raise e.with_step(step_name)
        return JSONDecoder(), target
    if definition.type == "regex":
        return RegexDecoder(definition.pattern or ""), None
    return PassthroughDecoder(), None


def build_memory(definition: MemoryDefinition) -> BaseMemory:
    if definition.type == "redis":
        return RedisMemory.from_config(RedisConfig(), namespace=definition.namespace)
    return RamMemory()


def build_pipeline(
    definition: PipelineDefinition,
    registry: Optional[BackendRegistry] = None,
    memory: Optional[BaseMemory] = None,
) -> Pipeline:
    """
    Assemble a Pipeline from a definition.

    Args:
        definition: Parsed definition
        registry: Backends to use; built from definition.backends if omitted
        memory: Store to use instead of the one the definition describes
    """
    if registry is None:
        registry = BackendRegistry()
        registry.load_mapping(definition.backends)

    steps = []
    for step_definition in definition.steps:
        decoder, target = build_decoder(step_definition.decoder, step_definition.name)
        steps.append(
            Step(
                name=step_definition.name,
                backend=registry.get(step_definition.backend),
                mode=step_definition.mode,
                prompt=PromptTemplate(step_definition.template, step_definition.bindings),
                decoder=decoder,
                target=target,
            )
        )

    return Pipeline(steps, memory=memory if memory is not None else build_memory(definition.memory))
