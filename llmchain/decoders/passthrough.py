"""Decoder returning the raw text unchanged."""

from .base import BaseDecoder
from .targets import DecodeTarget, Scalar


class PassthroughDecoder(BaseDecoder):
    """Never fails: the destination receives the raw text as-is."""

    @property
    def name(self) -> str:
        return "passthrough"

    def accepts(self, target: DecodeTarget) -> bool:
        return isinstance(target, Scalar)

    def default_target(self) -> DecodeTarget:
        return Scalar()

    def decode(self, raw: str, target: DecodeTarget) -> str:
        return raw
