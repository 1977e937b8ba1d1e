"""Semantic cache consulted by model backends before invoking a model."""

from .embedder import OpenAIEmbedder
from .index import InMemoryIndex
from .semantic import (
    CACHE_ANSWER_METADATA_KEY,
    CacheConfig,
    CacheResult,
    Embedder,
    SearchResult,
    SemanticCache,
    VectorIndex,
)

__all__ = [
    "CACHE_ANSWER_METADATA_KEY",
    "CacheConfig",
    "CacheResult",
    "Embedder",
    "InMemoryIndex",
    "OpenAIEmbedder",
    "SearchResult",
    "SemanticCache",
    "VectorIndex",
]
