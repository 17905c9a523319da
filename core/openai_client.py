from typing import Any, Dict, List, Optional
import httpx
from config.settings import settings
from core.vector_codec import as_float32
from model.qa import Embedding
from util.constants import ExternalURIs
from util.errors import ProviderError
import logging
from util.timing import timed

logger = logging.getLogger(__name__)


def build_http_client(timeout: float = settings.PROVIDER_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    """
    Long-lived client for the OpenAI REST API. One per process, shared by requests.
    """
    return httpx.AsyncClient(
        base_url=settings.OPENAI_API_URL,
        headers={
            "authorization": f"Bearer {settings.OPENAI_API_KEY}",
            "content-type": "application/json",
        },
        timeout=httpx.Timeout(timeout, connect=5.0),
    )


def _error_message(resp: httpx.Response) -> str:
    try:
        err = resp.json().get("error") or {}
        return str(err.get("message") or resp.reason_phrase)
    except Exception:
        return resp.reason_phrase or "provider error"


class OpenAIClient:
    """
    Embeddings + chat completions over the OpenAI REST API.

    Every failure (transport, timeout, non-2xx, unexpected payload) surfaces as
    ProviderError so callers have a single thing to catch.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        chat_model: str = settings.OPENAI_CHAT_MODEL,
        embedding_model: str = settings.OPENAI_EMBEDDING_MODEL,
        dimension: int = settings.EMBEDDING_DIMENSION,
    ) -> None:
        self._http = http
        self._chat_model = chat_model
        self._embedding_model = embedding_model
        self._dimension = dimension

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self._http.post(path, json=payload)
        except httpx.TimeoutException as e:
            logger.error("openai.timeout path=%s", path)
            raise ProviderError(f"OpenAI request timed out: {type(e).__name__}") from e
        except httpx.RequestError as e:
            logger.error("openai.request_error path=%s err=%s", path, type(e).__name__)
            raise ProviderError(f"OpenAI request failed: {type(e).__name__}") from e

        if resp.status_code // 100 != 2:
            message = _error_message(resp)
            logger.error(
                "openai.bad_status path=%s status=%d msg=%s", path, resp.status_code, message
            )
            raise ProviderError(message, resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError("OpenAI returned invalid JSON", resp.status_code) from e

    async def create_embedding(self, text: str) -> Embedding:
        payload = {"model": self._embedding_model, "input": text}
        with timed(logger, "openai.embed", model=self._embedding_model, chars=len(text)):
            data = await self._post(ExternalURIs.OPENAI_EMBEDDINGS, payload)

        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("OpenAI embedding response missing data") from e

        if not isinstance(vector, list) or len(vector) != self._dimension:
            size = len(vector) if isinstance(vector, list) else "n/a"
            raise ProviderError(
                f"OpenAI embedding has dimension {size}, expected {self._dimension}"
            )
        return as_float32(vector)

    async def _complete(self, messages: List[Dict[str, str]], op: str) -> str:
        payload = {"model": self._chat_model, "messages": messages}
        with timed(logger, f"openai.{op}", model=self._chat_model):
            data = await self._post(ExternalURIs.OPENAI_CHAT_COMPLETIONS, payload)

        content: Optional[str] = None
        try:
            choices = data.get("choices") or []
            if choices and isinstance(choices, list):
                content = (choices[0].get("message") or {}).get("content")
        except AttributeError:
            content = None

        if not content:
            raise ProviderError("OpenAI returned empty response")
        logger.info("openai.%s.ok chars=%d", op, len(content))
        return content

    async def generate_response(self, question: str) -> str:
        return await self._complete(
            [
                {"role": "system", "content": settings.SYSTEM_PROMPT},
                {"role": "user", "content": question},
            ],
            op="answer",
        )

    async def generate_summary(self, messages: str) -> str:
        return await self._complete(
            [{"role": "user", "content": f"{settings.SUMMARY_PROMPT}{messages}"}],
            op="summary",
        )

    async def check_health(self) -> bool:
        try:
            resp = await self._http.get(ExternalURIs.OPENAI_MODELS)
            return resp.status_code // 100 == 2
        except httpx.HTTPError as e:
            logger.warning("openai.health.error err=%s", type(e).__name__)
            return False
