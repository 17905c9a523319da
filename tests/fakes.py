"""In-memory stand-ins for the network backends."""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from redis.commands.search.document import Document
from redis.exceptions import ResponseError
from model.qa import Embedding, MatchCandidate, QAEntry
from util.errors import ProviderError, TierError


def doc(doc_id: str, **fields: Any) -> Document:
    return Document(doc_id, **fields)


class FakeSearch:
    """The slice of AsyncSearch the fast tier uses: create_index and search."""

    def __init__(self, owner: "FakeRedis", index: str) -> None:
        self._owner = owner
        self._index = index

    async def create_index(self, fields, definition=None, **kw: Any) -> str:
        owner = self._owner
        if owner.fail_with is not None:
            raise owner.fail_with
        if self._index in owner.indexes:
            raise ResponseError("Index already exists")
        owner.indexes[self._index] = {"fields": fields, "definition": definition}
        return "OK"

    async def search(self, query, query_params: Optional[Dict[str, Any]] = None) -> Any:
        owner = self._owner
        owner.searches.append((self._index, query, query_params or {}))
        if owner.fail_with is not None:
            raise owner.fail_with
        return SimpleNamespace(total=len(owner.search_docs), docs=list(owner.search_docs))


class FakeRedis:
    """Enough of redis.asyncio.Redis for the repositories under test."""

    def __init__(self, search_docs: Optional[List[Document]] = None) -> None:
        self.kv: Dict[str, bytes] = {}
        self.hashes: Dict[str, Dict[str, Any]] = {}
        self.indexes: Dict[str, Dict[str, Any]] = {}
        self.search_docs: List[Document] = list(search_docs or [])
        self.searches: List[tuple] = []
        self.fail_with: Optional[BaseException] = None

    def ft(self, index_name: str = "idx") -> FakeSearch:
        return FakeSearch(self, index_name)

    async def get(self, key: str) -> Optional[bytes]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.kv.get(key)

    async def set(self, key: str, value: bytes) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        self.kv[key] = value
        return True

    async def hset(self, key: str, mapping: Dict[str, Any]) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        self.hashes.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def ping(self) -> bool:
        return True


class FakeKV:
    """Embedding cache / store double with call counting."""

    name = "fake_kv"

    def __init__(self, data: Optional[Dict[str, Embedding]] = None, fail: bool = False) -> None:
        self.data: Dict[str, Embedding] = dict(data or {})
        self.fail = fail
        self.gets: List[str] = []
        self.puts: List[tuple] = []

    async def get(self, text: str) -> Optional[Embedding]:
        self.gets.append(text)
        if self.fail:
            raise TierError(self.name, "get", ConnectionError("down"))
        return self.data.get(text)

    async def put(self, text: str, embedding: Embedding) -> None:
        self.puts.append((text, embedding))
        if self.fail:
            raise TierError(self.name, "put", ConnectionError("down"))
        self.data[text] = embedding


class FakeProvider:
    def __init__(self, embedding: Optional[Embedding] = None, error: Optional[ProviderError] = None) -> None:
        self.embedding = embedding or [0.1, 0.2, 0.3, 0.4]
        self.error = error
        self.calls: List[str] = []
        self.generated: List[str] = []

    async def create_embedding(self, text: str) -> Embedding:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.embedding)

    async def generate_response(self, question: str) -> str:
        self.generated.append(question)
        if self.error is not None:
            raise self.error
        return f"fresh answer to {question}"

    async def generate_summary(self, messages: str) -> str:
        return f"summary of {len(messages.splitlines())} messages"


class FakeTier:
    def __init__(
        self,
        name: str,
        candidates: Optional[List[MatchCandidate]] = None,
        knn_error: Optional[BaseException] = None,
        upsert_error: Optional[BaseException] = None,
    ) -> None:
        self.name = name
        self.candidates = candidates or []
        self.knn_error = knn_error
        self.upsert_error = upsert_error
        self.knn_calls = 0
        self.upserts: List[QAEntry] = []

    async def ensure_index(self) -> None:
        return None

    async def knn(self, embedding: Embedding, k: int) -> List[MatchCandidate]:
        self.knn_calls += 1
        if self.knn_error is not None:
            raise self.knn_error
        return sorted(self.candidates, key=lambda c: c.score, reverse=True)[:k]

    async def upsert(self, entry: QAEntry) -> str:
        self.upserts.append(entry)
        if self.upsert_error is not None:
            raise self.upsert_error
        return f"{self.name}-{len(self.upserts)}"


class FakeSlack:
    def __init__(self, thread: Optional[List[str]] = None) -> None:
        self.posted: List[Dict[str, Any]] = []
        self.thread = thread or []

    async def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> None:
        self.posted.append({"channel": channel, "text": text, "thread_ts": thread_ts})

    async def get_thread_messages(self, channel: str, thread_ts: str) -> List[str]:
        return list(self.thread)
