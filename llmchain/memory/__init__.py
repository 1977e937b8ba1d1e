"""Memory stores shared by the steps of a pipeline."""

from .base import BaseMemory
from .ram import RamMemory
from .redis_memory import RedisConfig, RedisMemory

__all__ = [
    "BaseMemory",
    "RamMemory",
    "RedisConfig",
    "RedisMemory",
]
