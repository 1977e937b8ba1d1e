"""Prompt templates rendered from step bindings and pipeline memory.

Syntax:
    {{ name }}          value of a step-local binding
    {{ step1.output }}  field of the memory entry written by step1
    {{ .step1.output }} same, with a leading dot

Dotted references walk nested dicts below the entry. A reference that
cannot be resolved is an error; nothing is ever replaced by an empty string.
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import ResolveError, ResolveReason
from ..memory.base import BaseMemory

_SEGMENT = r"[A-Za-z_][\w-]*"
_REFERENCE = re.compile(rf"^\s*\.?({_SEGMENT}(?:\.{_SEGMENT})*)\s*$")
_PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)

# Key under which a pipeline exposes external input to its first step
INPUT_KEY = "input"


def parse_template(template: str) -> List[Tuple[str, Tuple[str, ...]]]:
    """
    Find every placeholder in a template.

    Returns:
        List of (placeholder text, reference path) in order of appearance

    Raises:
        ResolveError: MALFORMED_TEMPLATE on an invalid or unbalanced placeholder
    """
    placeholders = []
    for match in _PLACEHOLDER.finditer(template):
        expression = match.group(1)
        reference = _REFERENCE.match(expression)
        if reference is None:
            raise ResolveError(
                f"Invalid template reference {{{{{expression}}}}}",
                reason=ResolveReason.MALFORMED_TEMPLATE,
                reference=expression.strip(),
            )
        placeholders.append((match.group(0), tuple(reference.group(1).split("."))))

    # A lone "}}" is literal text; a "{{" must always open a placeholder
    if "{{" in _PLACEHOLDER.sub("", template):
        raise ResolveError(
            "Unclosed '{{' in template",
            reason=ResolveReason.MALFORMED_TEMPLATE,
        )
    return placeholders


def format_value(value: Any) -> str:
    """Text form of a bound value."""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class PromptTemplate:
    """
    A template plus the static bindings it was built with.

    Rendering is a pure function of the template, the bindings, the run-time
    inputs and the memory contents at the time the step executes.
    """

    def __init__(self, template: str, bindings: Optional[Mapping[str, Any]] = None):
        self.template = template
        self.bindings: Dict[str, Any] = dict(bindings or {})
        self._placeholders = parse_template(template)

    @property
    def references(self) -> List[str]:
        """Every reference used by the template, dotted, in order."""
        return [".".join(path) for _, path in self._placeholders]

    def render(
        self,
        memory: Optional[BaseMemory] = None,
        inputs: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Render the template.

        Args:
            memory: Store holding the entries of the steps that already ran
            inputs: Run-time bindings, overlaid on the static ones

        Returns:
            The literal prompt text

        Raises:
            ResolveError: MISSING_BINDING if a reference cannot be resolved
        """
        local = {**self.bindings, **(inputs or {})}

        paths = iter(self._placeholders)

        def substitute(match: re.Match) -> str:
            _, path = next(paths)
            return format_value(self._resolve(path, local, memory))

        return _PLACEHOLDER.sub(substitute, self.template)

    def _resolve(
        self,
        path: Tuple[str, ...],
        local: Mapping[str, Any],
        memory: Optional[BaseMemory],
    ) -> Any:
        reference = ".".join(path)

        if len(path) == 1:
            if path[0] not in local:
                raise ResolveError(
                    f"No binding named '{reference}'",
                    reason=ResolveReason.MISSING_BINDING,
                    reference=reference,
                )
            return local[path[0]]

        step_name = path[0]
        if memory is None or not memory.has(step_name):
            raise ResolveError(
                f"No memory entry for step '{step_name}' (referenced as '{reference}')",
                reason=ResolveReason.MISSING_BINDING,
                reference=reference,
            )

        value = memory.get(step_name)
        for segment in path[1:]:
            if not isinstance(value, Mapping) or segment not in value:
                raise ResolveError(
                    f"Memory entry '{step_name}' has no field '{reference}'",
                    reason=ResolveReason.MISSING_BINDING,
                    reference=reference,
                )
            value = value[segment]
        return value

    def __repr__(self) -> str:
        preview = self.template[:40].replace("\n", " ")
        return f"PromptTemplate({preview!r}, bindings={list(self.bindings)})"
