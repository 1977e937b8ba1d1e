"""Decoders turning raw model text into typed values."""

from .base import BaseDecoder
from .json_decoder import JSONDecoder
from .passthrough import PassthroughDecoder
from .regex import RegexDecoder
from .targets import DecodeTarget, Record, Scalar, Sequence

__all__ = [
    "BaseDecoder",
    "PassthroughDecoder",
    "JSONDecoder",
    "RegexDecoder",
    "DecodeTarget",
    "Scalar",
    "Record",
    "Sequence",
]
