import hashlib
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import List, Optional

import openai

logger = logging.getLogger(__name__)


class EmbeddingService(ABC):
    """Maps a query string to a dense vector."""

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        pass


class OpenAIEmbeddingService(EmbeddingService):
    def __init__(
        self,
        api_key: str,
        model_name: str = "text-embedding-3-small",
        cache_size: int = 1000,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        self.openai_client = client or openai.AsyncOpenAI(api_key=api_key)
        self.model_name = model_name
        self.memory_cache = EmbeddingCache(max_size=cache_size)

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single query, serving repeats from the in-memory cache"""
        cache_key = self._get_cache_key(text)
        cached = self.memory_cache.get(cache_key)
        if cached is not None:
            return cached

        # Errors propagate; the retriever turns them into RetrievalError
        response = await self.openai_client.embeddings.create(
            model=self.model_name,
            input=[text],
        )
        embedding = list(response.data[0].embedding)
        self.memory_cache.set(cache_key, embedding)
        logger.debug("Embedded query with %s (%d dims)", self.model_name, len(embedding))
        return embedding

    def _get_cache_key(self, text: str) -> str:
        text_hash = hashlib.sha256(text.encode()).hexdigest()
        return f"embedding:{self.model_name}:{text_hash}"


class EmbeddingCache:
    """Simple in-memory LRU cache for embeddings"""

    def __init__(self, max_size: int = 1000):
        self.cache: "OrderedDict[str, List[float]]" = OrderedDict()
        self.max_size = max_size

    def get(self, key: str) -> Optional[List[float]]:
        if key not in self.cache:
            return None
        self.cache.move_to_end(key)
        return self.cache[key]

    def set(self, key: str, embedding: List[float]):
        if self.max_size <= 0:
            return
        self.cache[key] = embedding
        self.cache.move_to_end(key)
        while len(self.cache) > self.max_size:
            self.cache.popitem(last=False)

    def __len__(self) -> int:
        return len(self.cache)
