import asyncio
import logging
from typing import Awaitable, List, Protocol, TypeVar, runtime_checkable
from config.settings import settings
from model.qa import Embedding, MatchCandidate, QAEntry
from util.errors import TierError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class VectorTier(Protocol):
    """
    Uniform contract over one vector index backend.

    knn() returns candidates sorted by descending cosine similarity; each
    implementation documents how it maps its native score onto that.
    """

    name: str

    async def ensure_index(self) -> None: ...

    async def upsert(self, entry: QAEntry) -> str: ...

    async def knn(self, embedding: Embedding, k: int) -> List[MatchCandidate]: ...


async def call_tier(
    tier: str,
    operation: str,
    aw: Awaitable[T],
    timeout: float = settings.TIER_TIMEOUT_SECONDS,
) -> T:
    """
    Await a backend call with a bounded timeout. Timeouts and backend
    exceptions both come out as TierError.
    """
    try:
        return await asyncio.wait_for(aw, timeout=timeout)
    except TierError:
        raise
    except asyncio.TimeoutError as e:
        raise TierError(tier, operation, e) from e
    except Exception as e:
        raise TierError(tier, operation, e) from e


def log_tier_error(err: TierError, *, level: int = logging.ERROR) -> None:
    logger.log(
        level,
        "tier.error tier=%s op=%s kind=%s msg=%s",
        err.tier,
        err.operation,
        err.kind,
        err.cause,
    )


def is_already_exists(message: str) -> bool:
    return "already exists" in message.lower() or "already_exists" in message.lower()
