from typing import Final, Optional
from redis.asyncio import Redis
from config.settings import settings
from core import vector_codec
from model.qa import Embedding
from repository.namespaces import EMBEDDINGS
from repository.tier import call_tier
from util.errors import TierError
import logging

logger = logging.getLogger(__name__)

KEY_PREFIX: Final[str] = EMBEDDINGS


class EmbeddingCacheRepository:
    """
    Redis-backed text -> embedding cache.

    Keys are the exact source text (case and whitespace sensitive), values are
    float32 blobs from core.vector_codec. No TTL: eviction is left to Redis'
    own maxmemory policy.
    """

    name: str = "embedding_cache"

    def __init__(
        self,
        redis: Redis,
        *,
        dimension: int = settings.EMBEDDING_DIMENSION,
        timeout: float = settings.TIER_TIMEOUT_SECONDS,
    ) -> None:
        self._r = redis
        self._dim = int(dimension)
        self._timeout = timeout

    @staticmethod
    def _key(text: str) -> str:
        return f"{KEY_PREFIX}{text}"

    async def get(self, text: str) -> Optional[Embedding]:
        raw = await call_tier(self.name, "get", self._r.get(self._key(text)), self._timeout)
        if raw is None:
            return None
        try:
            embedding = vector_codec.decode(raw)
        except (TypeError, ValueError) as e:
            raise TierError(self.name, "get", e) from e
        if len(embedding) != self._dim:
            # Written under another embedding model; treat as absent.
            logger.warning("cache.get.dimension got=%d want=%d", len(embedding), self._dim)
            return None
        return embedding

    async def put(self, text: str, embedding: Embedding) -> None:
        await call_tier(
            self.name,
            "put",
            self._r.set(self._key(text), vector_codec.encode(embedding)),
            self._timeout,
        )
