"""Base class for memory stores shared by the steps of a pipeline."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator

from .serializer import serialize_json


class BaseMemory(ABC):
    """
    Mapping from step name to step entry.

    Entries are written once per step per run and read by the prompt
    templates of later steps. Lookup is by key; insertion order carries no
    meaning. Implementations do not lock: a store must not be shared by
    pipelines running concurrently.
    """

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store or overwrite the value under key."""
        pass

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default when absent."""
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check if key exists in the store."""
        pass

    @abstractmethod
    def all(self) -> Dict[str, Any]:
        """Return a snapshot of every entry."""
        pass

    def keys(self) -> list[str]:
        return list(self.all().keys())

    def dump(self, indent: int = 2) -> str:
        """Render the full store as JSON text for diagnostics."""
        return serialize_json(self.all(), indent=indent)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.all())
