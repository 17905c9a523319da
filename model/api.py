from typing import Dict, Optional
from pydantic import BaseModel, Field
from util.enums import AnswerSource


class AskRequest(BaseModel):
    question: str = Field(min_length=1)


class AskResponse(BaseModel):
    answer: str
    source: AnswerSource
    score: Optional[float] = None


class HealthResponse(BaseModel):
    ok: bool
    services: Dict[str, bool]
