"""Tests for the semantic answer cache and the in-memory vector index."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from llmchain.cache import CacheConfig, InMemoryIndex, OpenAIEmbedder, SemanticCache
from llmchain.cache.semantic import CACHE_ANSWER_METADATA_KEY
from llmchain.errors import CacheMiss


class StaticEmbedder:
    def __init__(self, vector):
        self.vector = vector

    async def embed(self, texts):
        return [self.vector for _ in texts]


@pytest.mark.unit
class TestInMemoryIndex:
    """Test suite for InMemoryIndex."""

    @pytest.mark.asyncio
    async def test_empty_index(self):
        assert await InMemoryIndex().search([1.0, 0.0]) == []

    @pytest.mark.asyncio
    async def test_ranks_by_cosine_similarity(self):
        index = InMemoryIndex()
        await index.add([0.0, 1.0], {"id": "orthogonal"})
        await index.add([1.0, 0.0], {"id": "same"})
        await index.add([1.0, 1.0], {"id": "diagonal"})

        results = await index.search([2.0, 0.0], top_k=2)

        assert [r.metadata["id"] for r in results] == ["same", "diagonal"]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(0.7071, abs=1e-3)

    @pytest.mark.asyncio
    async def test_zero_vector_scores_zero(self):
        index = InMemoryIndex()
        await index.add([0.0, 0.0], {"id": "zero"})

        results = await index.search([1.0, 0.0])

        assert results[0].score == 0.0


@pytest.mark.unit
class TestSemanticCache:
    """Test suite for SemanticCache."""

    @pytest.mark.asyncio
    async def test_miss_on_empty_index(self):
        cache = SemanticCache(StaticEmbedder([1.0, 0.0]), InMemoryIndex())

        with pytest.raises(CacheMiss) as exc_info:
            await cache.get("anything")

        assert exc_info.value.embedding == [1.0, 0.0]

    @pytest.mark.asyncio
    async def test_set_then_hit(self):
        index = InMemoryIndex()
        cache = SemanticCache(StaticEmbedder([1.0, 0.0]), index)

        await cache.set([1.0, 0.0], "stored answer")
        result = await cache.get("same question")

        assert result.answers == ["stored answer"]
        assert result.embedding == [1.0, 0.0]

    @pytest.mark.asyncio
    async def test_score_must_exceed_threshold(self):
        index = InMemoryIndex()
        await index.add([1.0, 1.0], {CACHE_ANSWER_METADATA_KEY: "close but not enough"})
        cache = SemanticCache(StaticEmbedder([1.0, 0.0]), index, CacheConfig(score_threshold=0.9))

        with pytest.raises(CacheMiss):
            await cache.get("question")

    @pytest.mark.asyncio
    async def test_results_without_answer_are_ignored(self):
        index = InMemoryIndex()
        await index.add([1.0, 0.0], {"other": "metadata"})
        cache = SemanticCache(StaticEmbedder([1.0, 0.0]), index)

        with pytest.raises(CacheMiss):
            await cache.get("question")

    @pytest.mark.asyncio
    async def test_top_k_answers(self):
        index = InMemoryIndex()
        await index.add([1.0, 0.0], {CACHE_ANSWER_METADATA_KEY: "a"})
        await index.add([0.99, 0.01], {CACHE_ANSWER_METADATA_KEY: "b"})
        cache = SemanticCache(StaticEmbedder([1.0, 0.0]), index, CacheConfig(top_k=2))

        result = await cache.get("question")

        assert result.answers == ["a", "b"]

    def test_default_config(self):
        config = CacheConfig()

        assert config.top_k == 1
        assert config.score_threshold == 0.9


@pytest.mark.unit
class TestOpenAIEmbedder:
    """Test suite for OpenAIEmbedder."""

    @pytest.mark.asyncio
    async def test_embed(self):
        client = MagicMock()
        client.embeddings.create = AsyncMock(
            return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2])])
        )
        embedder = OpenAIEmbedder(model="embed-test", client=client)

        assert await embedder.embed(["hello"]) == [[0.1, 0.2]]
        client.embeddings.create.assert_awaited_once_with(model="embed-test", input=["hello"])
