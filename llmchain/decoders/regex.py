"""Pattern-capture decoder: regex groups into an ordered sequence."""

import re
from typing import List

from ..errors import DecodeError, DecodeErrorKind
from .base import BaseDecoder
from .targets import DecodeTarget, Sequence


class RegexDecoder(BaseDecoder):
    """
    Applies a capture pattern and returns the groups of the first match.

    The pattern must compile and contain at least one capture group; both
    are checked here, at construction. Groups that did not take part in the
    match come back as empty strings.
    """

    def __init__(self, pattern: str, flags: int = 0):
        try:
            self.regex = re.compile(pattern, flags)
        except re.error as e:
            raise DecodeError(
                f"Invalid pattern {pattern!r}: {e}", DecodeErrorKind.INVALID_PATTERN
            ) from e

        if self.regex.groups == 0:
            raise DecodeError(
                f"Pattern {pattern!r} has no capture groups",
                DecodeErrorKind.INVALID_PATTERN,
            )

        self.pattern = pattern

    @property
    def name(self) -> str:
        return "regex"

    def accepts(self, target: DecodeTarget) -> bool:
        return isinstance(target, Sequence)

    def default_target(self) -> DecodeTarget:
        return Sequence()

    def decode(self, raw: str, target: DecodeTarget) -> List[str]:
        match = self.regex.search(raw)
        if match is None:
            preview = raw[:80].replace("\n", " ")
            raise DecodeError(
                f"Pattern {self.pattern!r} does not match output {preview!r}",
                DecodeErrorKind.NO_MATCH,
            )
        return [group if group is not None else "" for group in match.groups()]

    def __repr__(self) -> str:
        return f"RegexDecoder(pattern={self.pattern!r})"
