"""In-process memory store."""

import copy
from typing import Any, Dict, Optional

from .base import BaseMemory


class RamMemory(BaseMemory):
    """Dict-backed memory store living as long as the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    def all(self) -> Dict[str, Any]:
        """Return a deep copy so callers cannot mutate stored entries."""
        return copy.deepcopy(self._data)

    def clear(self) -> None:
        self._data.clear()

    def __repr__(self) -> str:
        return f"RamMemory(keys={list(self._data.keys())})"
