import time
from datetime import timezone
from typing import Any, Final, Iterable, List
from redis.asyncio import Redis
from redis.commands.search.field import TextField, VectorField
from redis.commands.search.index_definition import IndexDefinition, IndexType
from redis.commands.search.query import Query
from redis.exceptions import ResponseError
from config.settings import settings
from core import vector_codec
from model.qa import Embedding, MatchCandidate, QAEntry
from repository.namespaces import QUESTIONS, QUESTIONS_INDEX
from repository.tier import call_tier, is_already_exists
from util.enums import TierName
from util.errors import MalformedResultError, TierError
import logging
from util.timing import timed

logger = logging.getLogger(__name__)

KEY_PREFIX: Final[str] = QUESTIONS
SCORE_FIELD: Final[str] = "vector_score"


def _text(v: Any) -> str:
    # Fields normally arrive decoded; raw bytes must still be valid utf-8.
    return v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else str(v)


class RedisVectorRepository:
    """
    Fast tier: RediSearch FLAT/COSINE index over HASH documents `question:<id>`.

    Fields: vector (float32 blob), text (question), response, timestamp.

    Score convention: RediSearch reports cosine *distance* in `vector_score`
    (0 = identical). knn() converts it with similarity = 1 - distance.
    """

    name: str = TierName.FAST.value

    def __init__(
        self,
        redis: Redis,
        *,
        index_name: str = QUESTIONS_INDEX,
        dimension: int = settings.EMBEDDING_DIMENSION,
        timeout: float = settings.TIER_TIMEOUT_SECONDS,
    ) -> None:
        self._r = redis
        self._index = index_name
        self._dim = int(dimension)
        self._timeout = timeout

    @staticmethod
    def _key(doc_id: str) -> str:
        return f"{KEY_PREFIX}{doc_id}"

    def _schema(self):
        return (
            VectorField(
                "vector",
                "FLAT",
                {"TYPE": "FLOAT32", "DIM": self._dim, "DISTANCE_METRIC": "COSINE"},
            ),
            TextField("text"),
            TextField("response"),
        )

    async def ensure_index(self) -> None:
        try:
            await call_tier(
                self.name,
                "ensure_index",
                self._r.ft(self._index).create_index(
                    self._schema(),
                    definition=IndexDefinition(prefix=[KEY_PREFIX], index_type=IndexType.HASH),
                ),
                self._timeout,
            )
            logger.info("fast.index.created index=%s dim=%d", self._index, self._dim)
        except TierError as e:
            if isinstance(e.cause, ResponseError) and is_already_exists(str(e.cause)):
                logger.info("fast.index.exists index=%s", self._index)
                return
            raise

    async def upsert(self, entry: QAEntry) -> str:
        if len(entry.embedding) != self._dim:
            raise TierError(
                self.name,
                "upsert",
                ValueError(f"dimension {len(entry.embedding)} != {self._dim}"),
            )
        doc_id = entry.id or str(time.time_ns())
        mapping = {
            "vector": vector_codec.encode(entry.embedding),
            "text": entry.question,
            "response": entry.response,
            "timestamp": entry.created_at.astimezone(timezone.utc).isoformat(),
        }
        with timed(logger, "fast.upsert"):
            await call_tier(
                self.name, "upsert", self._r.hset(self._key(doc_id), mapping=mapping), self._timeout
            )
        logger.info("fast.upsert.ok id=%s", self._key(doc_id))
        return doc_id

    @staticmethod
    def _query(k: int) -> Query:
        return (
            Query(f"*=>[KNN {int(k)} @vector $BLOB AS {SCORE_FIELD}]")
            .return_fields("text", "response", SCORE_FIELD)
            .sort_by(SCORE_FIELD)
            .paging(0, int(k))
            .dialect(2)
        )

    async def knn(self, embedding: Embedding, k: int) -> List[MatchCandidate]:
        with timed(logger, "fast.knn", k=k):
            result = await call_tier(
                self.name,
                "knn",
                self._r.ft(self._index).search(
                    self._query(k), query_params={"BLOB": vector_codec.encode(embedding)}
                ),
                self._timeout,
            )
        out = self.parse_docs(getattr(result, "docs", None) or [])
        logger.info("fast.knn.result count=%d", len(out))
        return out

    def parse_docs(self, docs: Iterable[Any]) -> List[MatchCandidate]:
        """
        Normalize search Documents into candidates, best first.
        A document missing a response or score, or carrying undecodable
        bytes, is dropped on its own.
        """
        out: List[MatchCandidate] = []
        for doc in docs:
            try:
                out.append(self._to_candidate(doc))
            except MalformedResultError as e:
                logger.warning("fast.knn.malformed doc=%s reason=%s", e.doc_id, e.reason)

        out.sort(key=lambda c: c.score, reverse=True)
        return out

    def _to_candidate(self, doc: Any) -> MatchCandidate:
        doc_id = getattr(doc, "id", None)
        if isinstance(doc_id, (bytes, bytearray)):
            doc_id = doc_id.decode("utf-8", "replace")
        doc_id = str(doc_id)

        try:
            response = _text(getattr(doc, "response", "") or "")
            question = _text(getattr(doc, "text", "") or "")
            raw_score = getattr(doc, SCORE_FIELD, None)
        except UnicodeDecodeError:
            raise MalformedResultError(self.name, doc_id, "field is not valid utf-8")

        if not response:
            raise MalformedResultError(self.name, doc_id, "missing response")
        try:
            distance = float(_text(raw_score)) if raw_score is not None else None
        except (UnicodeDecodeError, ValueError):
            distance = None
        if distance is None:
            raise MalformedResultError(self.name, doc_id, "missing or invalid score")

        return MatchCandidate(
            response=response,
            score=1.0 - distance,
            question=question or None,
            tier=TierName.FAST,
        )

    async def check_health(self) -> bool:
        try:
            return bool(await call_tier(self.name, "ping", self._r.ping(), self._timeout))
        except TierError as e:
            logger.warning("fast.health.error kind=%s", e.kind)
            return False
