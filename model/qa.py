from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from util.enums import TierName

Embedding = List[float]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QAEntry(BaseModel):
    """
    A cached question/answer pair. Each tier stores its own copy under its
    own generated id, so `id` is assigned by the tier on upsert.
    """

    model_config = ConfigDict(frozen=True)

    question: str
    response: str
    embedding: Embedding
    created_at: datetime = Field(default_factory=_utcnow)
    id: Optional[str] = None


class MatchCandidate(BaseModel):
    # score is always a cosine similarity in [-1, 1], higher = closer
    response: str
    score: float
    question: Optional[str] = None
    tier: Optional[TierName] = None

    def accepted(self, threshold: float) -> bool:
        return self.score > threshold
