import logging
from typing import NamedTuple, Optional, Protocol
from service.embedding_service import EmbeddingResolver
from service.similarity_service import SimilarityCascade
from service.write_back_service import WriteBackCoordinator
from util.enums import AnswerSource, TierName

logger = logging.getLogger(__name__)


class ResponseGenerator(Protocol):
    async def generate_response(self, question: str) -> str: ...


class Answer(NamedTuple):
    text: str
    source: AnswerSource
    score: Optional[float] = None


class AnswerService:
    """
    Question -> answer through the semantic cache.

    resolve embedding -> cascade -> hit: cached answer
                                 -> miss: generate, then schedule write-back
    ProviderError from embedding or generation propagates to the caller.
    """

    def __init__(
        self,
        resolver: EmbeddingResolver,
        cascade: SimilarityCascade,
        writer: WriteBackCoordinator,
        generator: ResponseGenerator,
    ) -> None:
        self._resolver = resolver
        self._cascade = cascade
        self._writer = writer
        self._generator = generator

    async def answer(self, question: str) -> Answer:
        embedding = await self._resolver.resolve(question)

        hit = await self._cascade.find_best_answer(embedding, question=question)
        if hit is not None:
            source = AnswerSource.FAST if hit.tier == TierName.FAST else AnswerSource.DURABLE
            return Answer(hit.response, source, hit.score)

        response = await self._generator.generate_response(question)
        self._writer.schedule(question, response, embedding)
        logger.info("answer.generated chars=%d", len(response))
        return Answer(response, AnswerSource.GENERATED)
