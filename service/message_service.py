import logging
from typing import Awaitable, Callable, List, Protocol, Tuple
from core.slack_client import SlackClient
from model.slack import SlackMessage
from service.answer_service import AnswerService
from util.constants import Commands, Responses
from util.enums import AnswerSource
from util.errors import ProviderError

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]
Handler = Callable[[SlackMessage], Awaitable[None]]


class Summarizer(Protocol):
    async def generate_summary(self, messages: str) -> str: ...


def is_help(text: str) -> bool:
    return Commands.HELP in text.lower()


def is_summarize(text: str) -> bool:
    return Commands.SUMMARIZE in text.lower()


def is_question(text: str) -> bool:
    return text.lower().endswith("?")


def is_greeting(text: str) -> bool:
    lowered = text.lower()
    return "hello" in lowered or "hi" in lowered


def always(_: str) -> bool:
    return True


class MessageService:
    """
    Routes an incoming chat message to the first handler whose predicate
    matches, in registration order. The catch-all default is registered last.
    """

    def __init__(self, slack: SlackClient, answers: AnswerService, summarizer: Summarizer) -> None:
        self._slack = slack
        self._answers = answers
        self._summarizer = summarizer
        self._routes: List[Tuple[Predicate, Handler]] = [
            (is_help, self._handle_help),
            (is_summarize, self._handle_summarize),
            (is_question, self._handle_question),
            (is_greeting, self._handle_greeting),
            (always, self._handle_default),
        ]

    def route(self, text: str) -> Handler:
        for predicate, handler in self._routes:
            if predicate(text):
                return handler
        raise LookupError("no handler for message")

    async def say(self, message: SlackMessage, text: str, thread_ts: str = "") -> None:
        await self._slack.post_message(message.channel, text, thread_ts or message.reply_thread)

    async def handle(self, message: SlackMessage) -> None:
        text = message.text or ""
        handler = self.route(text)
        logger.info("message.route handler=%s channel=%s", handler.__name__, message.channel)
        try:
            await handler(message)
        except Exception as e:
            logger.error("message.handle.error err=%s: %s", type(e).__name__, e)
            await self.say(message, Responses.ERROR)

    async def _handle_help(self, message: SlackMessage) -> None:
        await self.say(message, Responses.HELP)

    async def _handle_summarize(self, message: SlackMessage) -> None:
        if not message.thread_ts:
            await self.say(message, Responses.SUMMARIZE_NO_THREAD, message.ts)
            return
        try:
            thread = await self._slack.get_thread_messages(message.channel, message.thread_ts)
            summary = await self._summarizer.generate_summary("\n".join(thread))
        except Exception as e:
            logger.error("message.summarize.error err=%s: %s", type(e).__name__, e)
            await self.say(message, Responses.SUMMARIZE_ERROR)
            return
        await self.say(message, summary, message.thread_ts)

    async def _handle_question(self, message: SlackMessage) -> None:
        try:
            answer = await self._answers.answer(message.text or "")
        except ProviderError as e:
            logger.error("message.question.provider_error status=%s msg=%s", e.status_code, e.message)
            await self.say(message, Responses.QUESTION_ERROR)
            return

        if answer.source == AnswerSource.FAST:
            text = f"{Responses.FAST_TIER_HIT}{answer.text}"
        elif answer.source == AnswerSource.DURABLE:
            text = f"{Responses.DURABLE_TIER_HIT}{answer.text}"
        else:
            text = answer.text
        await self.say(message, text)

    async def _handle_greeting(self, message: SlackMessage) -> None:
        await self.say(message, Responses.WELCOME)

    async def _handle_default(self, message: SlackMessage) -> None:
        await self.say(message, Responses.default(message.text or ""))
