"""Base class for output decoders."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from .targets import DecodeTarget


class BaseDecoder(ABC):
    """Turns the raw text of one model call into a destination value."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def accepts(self, target: DecodeTarget) -> bool:
        """Check if this decoder can fill the given destination shape."""
        pass

    @abstractmethod
    def default_target(self) -> Optional[DecodeTarget]:
        """Destination shape used when a step does not supply one, if any."""
        pass

    @abstractmethod
    def decode(self, raw: str, target: DecodeTarget) -> Any:
        """
        Decode raw model output.

        Args:
            raw: Raw text returned by the model backend
            target: Destination shape accepted by this decoder

        Returns:
            The decoded value

        Raises:
            DecodeError: If the text cannot be shaped into the target
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
