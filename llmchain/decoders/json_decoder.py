"""Structured decoder: JSON text into a record shape."""

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from ..errors import DecodeError, DecodeErrorKind
from .base import BaseDecoder
from .targets import DecodeTarget, Record

logger = logging.getLogger(__name__)

# Models often wrap the object in prose or a fenced code block
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


class JSONDecoder(BaseDecoder):
    """
    Parses the raw text as a JSON object and binds it to a Record.

    Parsing tries the whole text first, then the outermost {...} block found
    in it. With repair enabled, trailing commas are dropped as a last
    attempt. Field binding goes through pydantic validation of the target
    model, so names match case-sensitively, defaults apply, and extra
    source fields are ignored unless the model forbids them.
    """

    def __init__(self, repair: bool = True):
        self.repair = repair

    @property
    def name(self) -> str:
        return "json"

    def accepts(self, target: DecodeTarget) -> bool:
        return isinstance(target, Record)

    def default_target(self) -> Optional[DecodeTarget]:
        # The caller must describe the record fields
        return None

    def decode(self, raw: str, target: DecodeTarget) -> BaseModel:
        if not isinstance(target, Record):
            raise DecodeError(
                f"JSON decoding needs a Record destination, got {target.kind}",
                DecodeErrorKind.SCHEMA_MISMATCH,
            )

        data = self.parse(raw)

        try:
            return target.model.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise DecodeError(
                f"Output does not fit {target.model.__name__}: {problems}",
                DecodeErrorKind.SCHEMA_MISMATCH,
            ) from e

    def parse(self, raw: str) -> Dict[str, Any]:
        """
        Parse raw text into a JSON object.

        Raises:
            DecodeError: MALFORMED if no JSON object can be read
        """
        for attempt_name, attempt in self._attempts(raw):
            try:
                data = json.loads(attempt)
            except json.JSONDecodeError:
                continue

            if not isinstance(data, dict):
                raise DecodeError(
                    f"Expected a JSON object, got {type(data).__name__}",
                    DecodeErrorKind.MALFORMED,
                )
            if attempt_name != "original":
                logger.debug(f"Parsed JSON after attempt: {attempt_name}")
            return data

        preview = raw[:80].replace("\n", " ")
        raise DecodeError(f"Output is not valid JSON: {preview!r}", DecodeErrorKind.MALFORMED)

    def _attempts(self, raw: str):
        yield "original", raw.strip()

        match: Optional[re.Match] = _OBJECT_PATTERN.search(raw)
        if match:
            block = match.group(0)
            yield "extract_object", block
            if self.repair:
                yield "fix_trailing_commas", _TRAILING_COMMA.sub(r"\1", block)
