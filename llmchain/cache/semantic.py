"""Embedding-based cache for model answers.

A backend consults the cache before invoking its model: the prompt is
embedded, the nearest stored prompts are searched, and answers whose
similarity is above the threshold are returned instead of a fresh call.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, runtime_checkable

from ..errors import CacheMiss

logger = logging.getLogger(__name__)

CACHE_ANSWER_METADATA_KEY = "cache-answer"


@dataclass
class SearchResult:
    """One index hit."""

    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Embedder(Protocol):
    async def embed(self, texts: List[str]) -> List[List[float]]:
        ...


@runtime_checkable
class VectorIndex(Protocol):
    async def search(self, vector: List[float], top_k: int) -> List[SearchResult]:
        ...

    async def add(self, vector: List[float], metadata: Dict[str, Any]) -> None:
        ...


@dataclass
class CacheConfig:
    """Configuration for the semantic cache."""

    top_k: int = 1
    score_threshold: float = 0.9


@dataclass
class CacheResult:
    """Answers found for a query, with the query embedding."""

    answers: List[str]
    embedding: List[float]


class SemanticCache:
    """Cache keyed by prompt similarity."""

    def __init__(self, embedder: Embedder, index: VectorIndex, config: CacheConfig | None = None):
        self.embedder = embedder
        self.index = index
        self.config = config or CacheConfig()

    async def get(self, query: str) -> CacheResult:
        """
        Look up answers for a query.

        Returns:
            CacheResult with every answer scoring above the threshold

        Raises:
            CacheMiss: If no stored answer is similar enough
        """
        embedding = (await self.embedder.embed([query]))[0]
        results = await self.index.search(embedding, top_k=self.config.top_k)

        answers = self._extract_answers(results)
        if answers:
            logger.debug(f"Cache HIT: {len(answers)} answer(s)")
            return CacheResult(answers=answers, embedding=embedding)

        logger.debug("Cache MISS")
        raise CacheMiss(embedding=embedding)

    async def set(self, embedding: List[float], answer: str) -> None:
        """Store an answer under the embedding of its query."""
        await self.index.add(embedding, {CACHE_ANSWER_METADATA_KEY: answer})

    def _extract_answers(self, results: List[SearchResult]) -> List[str]:
        answers = []
        for result in results:
            if result.score <= self.config.score_threshold:
                continue
            answer = result.metadata.get(CACHE_ANSWER_METADATA_KEY)
            if answer is None:
                continue
            answers.append(str(answer))
        return answers
