import hashlib
import hmac
import time
from typing import Any, Dict, List, Optional
import httpx
from config.settings import settings
from util.constants import ExternalURIs
import logging
from util.timing import timed

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"


def build_http_client(timeout: float = 10.0) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.SLACK_API_URL,
        headers={
            "authorization": f"Bearer {settings.SLACK_BOT_TOKEN}",
            "content-type": "application/json; charset=utf-8",
        },
        timeout=httpx.Timeout(timeout, connect=5.0),
    )


def verify_signature(
    *,
    body: bytes,
    timestamp: Optional[str],
    signature: Optional[str],
    secret: str = settings.SLACK_SIGNING_SECRET,
    max_age: int = settings.SLACK_MAX_REQUEST_AGE_SECONDS,
    now: Optional[float] = None,
) -> bool:
    """
    Check Slack's X-Slack-Signature: "v0=" + HMAC-SHA256(secret, "v0:{ts}:{body}").
    Requests older than `max_age` seconds are rejected to limit replays.
    """
    if not timestamp or not signature:
        return False
    try:
        ts = int(timestamp)
    except ValueError:
        return False
    if abs((now if now is not None else time.time()) - ts) > max_age:
        return False

    base = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), base, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"{SIGNATURE_VERSION}={digest}", signature)


class SlackClient:
    """
    Thin Slack Web API client: post replies, read threads, auth check.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def _call(self, method: str, path: str, **kw: Any) -> Dict[str, Any]:
        resp = await self._http.request(method, path, **kw)
        resp.raise_for_status()
        data = resp.json()
        if not data.get("ok"):
            raise RuntimeError(f"slack {path} error={data.get('error')}")
        return data

    async def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"channel": channel, "text": text}
        if thread_ts:
            payload["thread_ts"] = thread_ts
        with timed(logger, "slack.post", channel=channel):
            await self._call("POST", ExternalURIs.SLACK_POST_MESSAGE, json=payload)

    async def get_thread_messages(self, channel: str, thread_ts: str) -> List[str]:
        with timed(logger, "slack.replies", channel=channel):
            data = await self._call(
                "GET",
                ExternalURIs.SLACK_REPLIES,
                params={"channel": channel, "ts": thread_ts},
            )
        return [m.get("text") or "" for m in data.get("messages") or []]

    async def check_health(self) -> bool:
        try:
            await self._call("POST", ExternalURIs.SLACK_AUTH_TEST)
            return True
        except (httpx.HTTPError, RuntimeError, ValueError) as e:
            logger.warning("slack.health.error err=%s", type(e).__name__)
            return False
