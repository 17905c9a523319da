from dataclasses import dataclass
import httpx
from pymongo import AsyncMongoClient
from redis.asyncio import Redis
from config.cache import create_redis
from config.settings import settings
from core import openai_client, slack_client
from core.openai_client import OpenAIClient
from core.slack_client import SlackClient
from repository import pinecone_repository
from repository.embedding_cache_repository import EmbeddingCacheRepository
from repository.embedding_store_repository import EmbeddingStoreRepository
from repository.pinecone_repository import PineconeRepository
from repository.redis_vector_repository import RedisVectorRepository
import logging

logger = logging.getLogger(__name__)


@dataclass
class Clients:
    """
    Every long-lived connection the process owns, built once in the app
    lifespan and handed to services through FastAPI dependencies.
    """

    redis: Redis
    mongo: AsyncMongoClient
    openai_http: httpx.AsyncClient
    pinecone_http: httpx.AsyncClient
    slack_http: httpx.AsyncClient
    durable: PineconeRepository

    @classmethod
    async def create(cls) -> "Clients":
        redis = await create_redis()
        mongo: AsyncMongoClient = AsyncMongoClient(
            settings.MONGODB_URI,
            serverSelectionTimeoutMS=int(settings.TIER_TIMEOUT_SECONDS * 1000),
        )
        pinecone_http = pinecone_repository.build_http_client()
        return cls(
            redis=redis,
            mongo=mongo,
            openai_http=openai_client.build_http_client(),
            pinecone_http=pinecone_http,
            slack_http=slack_client.build_http_client(),
            # one instance so the resolved index host is reused
            durable=PineconeRepository(pinecone_http),
        )

    # ---------------- Wiring ----------------

    def openai(self) -> OpenAIClient:
        return OpenAIClient(self.openai_http)

    def slack(self) -> SlackClient:
        return SlackClient(self.slack_http)

    def fast_tier(self) -> RedisVectorRepository:
        return RedisVectorRepository(self.redis)

    def embedding_cache(self) -> EmbeddingCacheRepository:
        return EmbeddingCacheRepository(self.redis)

    def embedding_store(self) -> EmbeddingStoreRepository:
        return EmbeddingStoreRepository(self.mongo[settings.MONGODB_DB_NAME])

    async def ensure_indexes(self) -> None:
        """
        Create indexes if missing. "Already exists" is fine; anything else
        raises TierError and aborts startup.
        """
        await self.fast_tier().ensure_index()
        await self.durable.ensure_index()
        await self.embedding_store().ensure_indexes()
        logger.info("clients.indexes.ready")

    async def aclose(self) -> None:
        for name, closer in (
            ("redis", self.redis.aclose),
            ("mongo", self.mongo.close),
            ("openai", self.openai_http.aclose),
            ("pinecone", self.pinecone_http.aclose),
            ("slack", self.slack_http.aclose),
        ):
            try:
                await closer()
            except Exception as e:
                logger.warning("clients.close.error client=%s err=%s", name, type(e).__name__)
