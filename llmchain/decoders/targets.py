"""Destination shapes for decoded model output.

A step describes what its decoder should produce with one of three
variants. Decoders check the variant instead of inspecting Python types.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, create_model

from ..errors import ConfigurationError


def _field_name(field_name: Any) -> str:
    if not isinstance(field_name, str) or not field_name:
        raise ConfigurationError(f"Record field names must be non-empty strings, got {field_name!r}")
    # Leading underscores are private attributes (and create_model options) in pydantic
    if field_name.startswith("_"):
        raise ConfigurationError(f"Record field name {field_name!r} must not start with '_'")
    return field_name


class DecodeTarget:
    """Base class of the destination shape variants."""

    kind: str = "target"


@dataclass(frozen=True)
class Scalar(DecodeTarget):
    """A single value: the raw text itself."""

    kind = "scalar"


@dataclass(frozen=True)
class Sequence(DecodeTarget):
    """An ordered list of strings."""

    kind = "sequence"


@dataclass(frozen=True)
class Record(DecodeTarget):
    """
    Named fields, described by a pydantic model class.

    Fields without a default are required. Source fields are matched to
    model fields by exact, case-sensitive name.
    """

    model: Type[BaseModel]

    kind = "record"

    @classmethod
    def of(
        cls,
        *required: str,
        defaults: Optional[Mapping[str, Any]] = None,
        model_name: str = "Record",
    ) -> "Record":
        """
        Build a record shape without declaring a model class.

        Example:
            Record.of("First", "Second", defaults={"Third": "n/a"})

        Raises:
            ConfigurationError: If a field name cannot be used as a model field
        """
        fields: Dict[str, Any] = {}
        for field_name in required:
            fields[_field_name(field_name)] = (Any, ...)
        for field_name, default in (defaults or {}).items():
            fields[_field_name(field_name)] = (Any, default)

        try:
            model = create_model(model_name, **fields)
        except (TypeError, ValueError, NameError) as e:
            raise ConfigurationError(f"Invalid record fields {list(fields)}: {e}") from e
        return cls(model)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(self.model.model_fields.keys())

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(
            field_name
            for field_name, field in self.model.model_fields.items()
            if field.is_required()
        )
