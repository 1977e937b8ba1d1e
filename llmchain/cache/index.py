"""In-process vector index ranked by cosine similarity."""

from typing import Any, Dict, List

import numpy as np

from .semantic import SearchResult


class InMemoryIndex:
    """Keeps vectors in a numpy matrix; suitable for small caches."""

    def __init__(self):
        self._vectors: List[np.ndarray] = []
        self._metadata: List[Dict[str, Any]] = []

    async def add(self, vector: List[float], metadata: Dict[str, Any]) -> None:
        self._vectors.append(np.asarray(vector, dtype=float))
        self._metadata.append(dict(metadata))

    async def search(self, vector: List[float], top_k: int = 1) -> List[SearchResult]:
        if not self._vectors:
            return []

        matrix = np.vstack(self._vectors)
        query = np.asarray(vector, dtype=float)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        # Zero vectors never match
        scores = np.divide(
            matrix @ query, norms, out=np.zeros(len(self._vectors)), where=norms > 0
        )

        order = np.argsort(scores)[::-1][:top_k]
        return [
            SearchResult(score=float(scores[i]), metadata=dict(self._metadata[i]))
            for i in order
        ]

    def __len__(self) -> int:
        return len(self._vectors)
