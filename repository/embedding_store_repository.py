from datetime import datetime, timezone
from typing import Any, Optional
from pymongo import ASCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure
from config.settings import settings
from model.qa import Embedding
from repository.namespaces import EMBEDDINGS_COLLECTION
from repository.tier import call_tier
from util.errors import TierError
import logging

logger = logging.getLogger(__name__)


class EmbeddingStoreRepository:
    """
    Durable text -> embedding store in MongoDB.

    Document: {text, embedding, createdAt, updatedAt}. `text` carries a unique
    index; a TTL index on `updatedAt` lets MongoDB expire stale entries.
    """

    name: str = "embedding_store"

    def __init__(
        self,
        db: AsyncDatabase,
        *,
        collection: str = EMBEDDINGS_COLLECTION,
        dimension: int = settings.EMBEDDING_DIMENSION,
        ttl_seconds: int = settings.EMBEDDING_TTL_SECONDS,
        timeout: float = settings.TIER_TIMEOUT_SECONDS,
    ) -> None:
        self._db = db
        self._col = db[collection]
        self._ttl = int(ttl_seconds)
        self._dim = int(dimension)
        self._timeout = timeout

    async def ensure_indexes(self) -> None:
        try:
            await call_tier(
                self.name,
                "ensure_indexes",
                self._col.create_index([("text", ASCENDING)], unique=True, name="text_unique"),
                self._timeout,
            )
            await call_tier(
                self.name,
                "ensure_indexes",
                self._col.create_index(
                    [("updatedAt", ASCENDING)],
                    expireAfterSeconds=self._ttl,
                    name="updatedAt_ttl",
                ),
                self._timeout,
            )
        except TierError as e:
            # Same key, different options (e.g. a changed TTL) is not fatal.
            if isinstance(e.cause, OperationFailure) and e.cause.code in (85, 86):
                logger.warning("store.index.conflict msg=%s", e.cause)
                return
            raise
        logger.info("store.index.ready ttl=%d", self._ttl)

    async def get(self, text: str) -> Optional[Embedding]:
        doc: Optional[dict[str, Any]] = await call_tier(
            self.name,
            "get",
            self._col.find_one({"text": text}, projection={"embedding": 1, "_id": 0}),
            self._timeout,
        )
        if not doc:
            return None
        embedding = doc.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            logger.warning("store.get.malformed chars=%d", len(text))
            return None
        try:
            values = [float(x) for x in embedding]
        except (TypeError, ValueError) as e:
            raise TierError(self.name, "get", e) from e
        if len(values) != self._dim:
            logger.warning("store.get.dimension got=%d want=%d", len(values), self._dim)
            return None
        return values

    async def put(self, text: str, embedding: Embedding) -> None:
        now = datetime.now(timezone.utc)
        await call_tier(
            self.name,
            "put",
            self._col.update_one(
                {"text": text},
                {
                    "$set": {"embedding": list(embedding), "updatedAt": now},
                    "$setOnInsert": {"createdAt": now},
                },
                upsert=True,
            ),
            self._timeout,
        )

    async def check_health(self) -> bool:
        try:
            await call_tier(self.name, "ping", self._db.command("ping"), self._timeout)
            return True
        except TierError as e:
            logger.warning("store.health.error kind=%s", e.kind)
            return False
