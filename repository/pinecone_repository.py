import time
from datetime import timezone
from typing import Any, Dict, List, Optional
import httpx
from config.settings import settings
from model.qa import Embedding, MatchCandidate, QAEntry
from repository.namespaces import DURABLE_ID_PREFIX, QA_PAIR_TYPE
from repository.tier import call_tier, is_already_exists
from util.constants import ExternalURIs
from util.enums import TierName
from util.errors import MalformedResultError, TierError
import logging
from util.timing import timed

logger = logging.getLogger(__name__)


def build_http_client(timeout: float = settings.TIER_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={
            "Api-Key": settings.PINECONE_API_KEY,
            "X-Pinecone-API-Version": settings.PINECONE_API_VERSION,
            "content-type": "application/json",
        },
        timeout=httpx.Timeout(timeout, connect=5.0),
    )


class PineconeRepository:
    """
    Durable tier: a managed Pinecone serverless index, spoken to over its REST API.

    Vectors are stored with metadata {question, response, timestamp, type="qa_pair"}
    and queries filter on type.

    Score convention: the index metric is cosine, so Pinecone already reports
    cosine *similarity*. knn() passes it through unchanged.
    """

    name: str = TierName.DURABLE.value

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        index_name: str = settings.PINECONE_INDEX_NAME,
        index_host: str = settings.PINECONE_INDEX_HOST,
        control_url: str = settings.PINECONE_CONTROL_URL,
        dimension: int = settings.EMBEDDING_DIMENSION,
        timeout: float = settings.TIER_TIMEOUT_SECONDS,
    ) -> None:
        self._http = http
        self._index = index_name
        self._host: Optional[str] = self._normalize_host(index_host) if index_host else None
        self._control = control_url.rstrip("/")
        self._dim = int(dimension)
        self._timeout = timeout

    @staticmethod
    def _normalize_host(host: str) -> str:
        host = host.rstrip("/")
        return host if host.startswith("http") else f"https://{host}"

    async def _request(self, method: str, url: str, op: str, **kw: Any) -> httpx.Response:
        resp = await call_tier(self.name, op, self._http.request(method, url, **kw), self._timeout)
        return resp

    @staticmethod
    def _raise_for_status(resp: httpx.Response, op: str) -> None:
        if resp.status_code // 100 == 2:
            return
        raise TierError(
            TierName.DURABLE.value,
            op,
            RuntimeError(f"HTTP {resp.status_code}: {resp.text[:200]}"),
        )

    # ---------------- Control plane ----------------

    async def ensure_index(self) -> None:
        body = {
            "name": self._index,
            "dimension": self._dim,
            "metric": "cosine",
            "spec": {
                "serverless": {
                    "cloud": settings.PINECONE_CLOUD,
                    "region": settings.PINECONE_REGION,
                }
            },
        }
        resp = await self._request(
            "POST", f"{self._control}{ExternalURIs.PINECONE_INDEXES}", "ensure_index", json=body
        )
        if resp.status_code == 409 or (
            resp.status_code // 100 != 2 and is_already_exists(resp.text)
        ):
            logger.info("durable.index.exists index=%s", self._index)
        else:
            self._raise_for_status(resp, "ensure_index")
            logger.info("durable.index.created index=%s dim=%d", self._index, self._dim)

        if self._host is None:
            await self._resolve_host()

    async def _resolve_host(self) -> str:
        if self._host is not None:
            return self._host
        resp = await self._request(
            "GET",
            f"{self._control}{ExternalURIs.PINECONE_INDEXES}/{self._index}",
            "describe_index",
        )
        self._raise_for_status(resp, "describe_index")
        try:
            host = (resp.json() or {}).get("host")
        except ValueError as e:
            raise TierError(self.name, "describe_index", e) from e
        if not host:
            raise TierError(self.name, "describe_index", RuntimeError("index has no host yet"))
        self._host = self._normalize_host(str(host))
        logger.info("durable.index.host host=%s", self._host)
        return self._host

    # ---------------- Data plane ----------------

    async def upsert(self, entry: QAEntry) -> str:
        if len(entry.embedding) != self._dim:
            raise TierError(
                self.name,
                "upsert",
                ValueError(f"dimension {len(entry.embedding)} != {self._dim}"),
            )
        host = await self._resolve_host()
        vec_id = entry.id or f"{DURABLE_ID_PREFIX}{time.time_ns()}"
        body = {
            "vectors": [
                {
                    "id": vec_id,
                    "values": list(entry.embedding),
                    "metadata": {
                        "question": entry.question,
                        "response": entry.response,
                        "timestamp": entry.created_at.astimezone(timezone.utc).isoformat(),
                        "type": QA_PAIR_TYPE,
                    },
                }
            ]
        }
        with timed(logger, "durable.upsert"):
            resp = await self._request("POST", f"{host}{ExternalURIs.PINECONE_UPSERT}", "upsert", json=body)
        self._raise_for_status(resp, "upsert")
        logger.info("durable.upsert.ok id=%s", vec_id)
        return vec_id

    async def knn(self, embedding: Embedding, k: int) -> List[MatchCandidate]:
        host = await self._resolve_host()
        body = {
            "vector": list(embedding),
            "topK": int(k),
            "includeMetadata": True,
            "filter": {"type": {"$eq": QA_PAIR_TYPE}},
        }
        with timed(logger, "durable.knn", k=k):
            resp = await self._request("POST", f"{host}{ExternalURIs.PINECONE_QUERY}", "knn", json=body)
        self._raise_for_status(resp, "knn")
        try:
            data = resp.json()
        except ValueError as e:
            raise TierError(self.name, "knn", e) from e

        out = self.parse_matches(data)
        logger.info("durable.knn.result count=%d", len(out))
        return out

    def parse_matches(self, data: Dict[str, Any]) -> List[MatchCandidate]:
        """
        Normalize a query reply {matches: [{id, score, metadata}]}. Matches
        without question, response or a numeric score are dropped.
        """
        out: List[MatchCandidate] = []
        for m in (data or {}).get("matches") or []:
            try:
                out.append(self._to_candidate(m))
            except MalformedResultError as e:
                logger.warning("durable.knn.malformed doc=%s reason=%s", e.doc_id, e.reason)
        out.sort(key=lambda c: c.score, reverse=True)
        return out

    def _to_candidate(self, match: Any) -> MatchCandidate:
        if not isinstance(match, dict):
            raise MalformedResultError(self.name, "?", "match is not an object")
        doc_id = str(match.get("id") or "?")
        meta = match.get("metadata") or {}
        if not isinstance(meta, dict):
            raise MalformedResultError(self.name, doc_id, "metadata is not an object")
        question = meta.get("question")
        response = meta.get("response")
        score = match.get("score")
        if not question or not response:
            raise MalformedResultError(self.name, doc_id, "missing metadata")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise MalformedResultError(self.name, doc_id, "missing or invalid score")
        return MatchCandidate(
            response=str(response),
            score=float(score),
            question=str(question),
            tier=TierName.DURABLE,
        )

    async def check_health(self) -> bool:
        try:
            host = await self._resolve_host()
            resp = await self._request(
                "POST", f"{host}{ExternalURIs.PINECONE_STATS}", "stats", json={}
            )
            return resp.status_code // 100 == 2
        except TierError as e:
            logger.warning("durable.health.error kind=%s", e.kind)
            return False
