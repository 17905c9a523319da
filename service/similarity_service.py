import logging
from typing import List, Optional
from config.settings import settings
from model.qa import Embedding, MatchCandidate, QAEntry
from repository.tier import VectorTier, log_tier_error
from util.errors import TierError
from util.tasks import spawn

logger = logging.getLogger(__name__)


class SimilarityCascade:
    """
    Fast tier first, durable tier second, strict `score > threshold` acceptance.

    The fast tier's accepted candidate is returned without consulting the
    durable tier. A tier that errors or times out counts as empty.
    """

    def __init__(
        self,
        fast: VectorTier,
        durable: VectorTier,
        *,
        threshold: float = settings.MATCH_SCORE,
        k: int = settings.KNN_K,
        backfill: bool = settings.BACKFILL_FAST_TIER,
    ) -> None:
        self._fast = fast
        self._durable = durable
        self._threshold = threshold
        self._k = k
        self._backfill = backfill

    async def _search(self, tier: VectorTier, embedding: Embedding) -> List[MatchCandidate]:
        try:
            return await tier.knn(embedding, self._k)
        except TierError as e:
            log_tier_error(e)
        except Exception as e:
            logger.error(
                "tier.error tier=%s op=knn kind=%s msg=%s", tier.name, type(e).__name__, e
            )
        return []

    def _best(self, tier: VectorTier, candidates: List[MatchCandidate]) -> Optional[MatchCandidate]:
        if not candidates:
            logger.info("cascade.empty tier=%s", tier.name)
            return None
        top = max(candidates, key=lambda c: c.score)
        if top.accepted(self._threshold):
            return top
        logger.info(
            "cascade.below tier=%s score=%.4f threshold=%.2f", tier.name, top.score, self._threshold
        )
        return None

    async def find_best_answer(
        self, embedding: Embedding, question: Optional[str] = None
    ) -> Optional[MatchCandidate]:
        """
        Return the accepted candidate, or None on a miss.

        `question` is the incoming text; it is only used to label a fast-tier
        backfill when the durable match carries no stored question.
        """
        hit = self._best(self._fast, await self._search(self._fast, embedding))
        if hit is not None:
            logger.info("cascade.hit tier=%s score=%.4f", self._fast.name, hit.score)
            return hit

        hit = self._best(self._durable, await self._search(self._durable, embedding))
        if hit is not None:
            logger.info("cascade.hit tier=%s score=%.4f", self._durable.name, hit.score)
            if self._backfill:
                entry = QAEntry(
                    question=hit.question or question or "",
                    response=hit.response,
                    embedding=embedding,
                )
                spawn(self._backfill_fast(entry), name="cascade.backfill.fast")
            return hit

        logger.info("cascade.miss")
        return None

    async def _backfill_fast(self, entry: QAEntry) -> None:
        try:
            await self._fast.upsert(entry)
        except TierError as e:
            log_tier_error(e)
