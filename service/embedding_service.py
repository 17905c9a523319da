import logging
from typing import Optional, Protocol
from model.qa import Embedding
from repository.embedding_cache_repository import EmbeddingCacheRepository
from repository.embedding_store_repository import EmbeddingStoreRepository
from repository.tier import log_tier_error
from util.errors import TierError
from util.tasks import spawn

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    async def create_embedding(self, text: str) -> Embedding: ...


class EmbeddingResolver:
    """
    text -> embedding, cheapest source first:

    1. fast cache (Redis)            -> return
    2. durable store (MongoDB)       -> backfill fast cache in background, return
    3. provider (OpenAI)             -> write both in background, return

    Only the provider may fail the call (ProviderError). Cache/store read
    failures degrade to the next source; write failures are logged.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        cache: EmbeddingCacheRepository,
        store: Optional[EmbeddingStoreRepository] = None,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._store = store

    async def resolve(self, text: str) -> Embedding:
        cached = await self._read(self._cache, text)
        if cached is not None:
            logger.info("embed.resolve source=cache")
            return cached

        if self._store is not None:
            stored = await self._read(self._store, text)
            if stored is not None:
                logger.info("embed.resolve source=store")
                spawn(self._write(self._cache, text, stored), name="embed.backfill.cache")
                return stored

        embedding = await self._provider.create_embedding(text)
        logger.info("embed.resolve source=provider dim=%d", len(embedding))
        spawn(self._write(self._cache, text, embedding), name="embed.write.cache")
        if self._store is not None:
            spawn(self._write(self._store, text, embedding), name="embed.write.store")
        return embedding

    @staticmethod
    async def _read(repo, text: str) -> Optional[Embedding]:
        try:
            return await repo.get(text)
        except TierError as e:
            log_tier_error(e, level=logging.WARNING)
            return None

    @staticmethod
    async def _write(repo, text: str, embedding: Embedding) -> None:
        try:
            await repo.put(text, embedding)
        except TierError as e:
            log_tier_error(e)
