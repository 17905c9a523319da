import asyncio
import logging
from typing import Dict, Optional, Sequence
from model.qa import Embedding, QAEntry
from repository.tier import VectorTier, log_tier_error
from util.errors import TierError
from util.tasks import spawn

logger = logging.getLogger(__name__)


class WriteBackCoordinator:
    """
    After a miss, store the freshly generated answer in every tier.

    Upserts are independent and run concurrently; a failing tier is logged and
    does not stop the others. Tiers may end up holding different entries.
    """

    def __init__(self, tiers: Sequence[VectorTier]) -> None:
        self._tiers = list(tiers)

    async def record_answer(
        self, question: str, response: str, embedding: Embedding
    ) -> Dict[str, Optional[str]]:
        """
        Returns {tier name: stored id, or None when that tier's write failed}.
        """
        entry = QAEntry(question=question, response=response, embedding=embedding)
        results = await asyncio.gather(
            *(tier.upsert(entry) for tier in self._tiers), return_exceptions=True
        )

        stored: Dict[str, Optional[str]] = {}
        for tier, res in zip(self._tiers, results):
            if isinstance(res, TierError):
                log_tier_error(res)
                stored[tier.name] = None
            elif isinstance(res, BaseException):
                logger.error(
                    "tier.error tier=%s op=upsert kind=%s msg=%s",
                    tier.name,
                    type(res).__name__,
                    res,
                )
                stored[tier.name] = None
            else:
                stored[tier.name] = res

        ok = sum(1 for v in stored.values() if v is not None)
        logger.info("writeback.done ok=%d total=%d", ok, len(self._tiers))
        return stored

    def schedule(self, question: str, response: str, embedding: Embedding) -> "asyncio.Task":
        """Fire-and-forget record_answer; the caller does not wait on it."""
        return spawn(
            self.record_answer(question, response, embedding), name="writeback.record"
        )
