from fastapi import APIRouter, BackgroundTasks, Depends, Request
from controller.controller_dependencies import get_message_service
from core.slack_client import verify_signature
from model.slack import SlackMessage
from service.message_service import MessageService
from util.constants import InternalURIs, Responses
from util.enums import ErrorMessage
from util.errors import AppError
import logging

logger = logging.getLogger(__name__)

slack_router = APIRouter()


async def verified_payload(request: Request) -> dict:
    body = await request.body()
    ok = verify_signature(
        body=body,
        timestamp=request.headers.get("x-slack-request-timestamp"),
        signature=request.headers.get("x-slack-signature"),
    )
    if not ok:
        logger.warning("slack.signature.invalid")
        raise AppError(
            ErrorMessage.INVALID_SIGNATURE.value.message,
            ErrorMessage.INVALID_SIGNATURE.value.http_status,
        )
    return await request.json()


def _should_ignore(message: SlackMessage) -> bool:
    if message.subtype or message.bot_id:
        logger.info("slack.ignore.bot subtype=%s", message.subtype)
        return True
    if not message.user or not message.text:
        logger.warning("slack.ignore.empty channel=%s", message.channel)
        return True
    return False


async def _answer_in_background(service: MessageService, message: SlackMessage) -> None:
    try:
        await service.say(message, Responses.WORKING)
    except Exception as e:
        logger.error("slack.working.error err=%s", type(e).__name__)
    await service.handle(message)


@slack_router.post(InternalURIs.SLACK_EVENTS)
async def slack_events(
    background: BackgroundTasks,
    payload: dict = Depends(verified_payload),
    service: MessageService = Depends(get_message_service),
):
    # Flow: ack within Slack's 3s window, do the work after the response.
    kind = payload.get("type")
    if kind == "url_verification":
        return {"challenge": payload.get("challenge")}
    if kind != "event_callback":
        return {"ok": True}

    event = payload.get("event") or {}
    message = SlackMessage.model_validate(event)

    if message.type == "app_mention":
        background.add_task(service.say, message, Responses.MENTION)
        return {"ok": True}

    if message.type == "message" and not _should_ignore(message):
        logger.info("slack.message channel=%s", message.channel)
        background.add_task(_answer_in_background, service, message)
    return {"ok": True}
