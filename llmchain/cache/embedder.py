"""OpenAI embeddings for the semantic cache."""

import logging
from typing import List, Optional

from openai import AsyncOpenAI

from ..config import DEFAULT_EMBEDDING_MODEL, OPENAI_API_KEY, OPENAI_BASE_URL

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """Embeds texts with the OpenAI embeddings endpoint."""

    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.client = client or AsyncOpenAI(
            api_key=api_key or OPENAI_API_KEY,
            base_url=base_url or OPENAI_BASE_URL,
        )

    async def embed(self, texts: List[str]) -> List[List[float]]:
        response = await self.client.embeddings.create(model=self.model, input=texts)
        logger.debug(f"Embedded {len(texts)} text(s) with {self.model}")
        return [item.embedding for item in response.data]
