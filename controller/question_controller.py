from fastapi import APIRouter, Depends, status
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from controller.controller_dependencies import get_answer_service
from model.api import AskRequest, AskResponse
from service.answer_service import AnswerService
from util.constants import InternalURIs
from util.enums import ErrorMessage
from util.errors import AppError, ProviderError
import logging

logger = logging.getLogger(__name__)

rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)

question_router = APIRouter(dependencies=[Depends(rate_limiter)])


@question_router.post(
    InternalURIs.ASK,
    response_model=AskResponse,
    status_code=status.HTTP_200_OK,
)
async def ask(
    payload: AskRequest,
    service: AnswerService = Depends(get_answer_service),
) -> AskResponse:
    try:
        answer = await service.answer(payload.question)
    except ProviderError as e:
        logger.error("ask.provider_error status=%s msg=%s", e.status_code, e.message)
        raise AppError(
            ErrorMessage.CANNOT_ANSWER.value.message,
            ErrorMessage.CANNOT_ANSWER.value.http_status,
        )
    return AskResponse(answer=answer.text, source=answer.source, score=answer.score)
