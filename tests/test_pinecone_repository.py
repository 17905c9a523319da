import asyncio
import json

import httpx
import pytest

from model.qa import QAEntry
from repository.pinecone_repository import PineconeRepository
from util.enums import TierName
from util.errors import TierError

VEC = [0.1, 0.2, 0.3, 0.4]
HOST = "https://qa-test.svc.pinecone.io"


def _repo(handler, **kw) -> PineconeRepository:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kw.setdefault("index_host", HOST)
    return PineconeRepository(
        http, index_name="qa-test", control_url="https://api.pinecone.io", dimension=4, **kw
    )


def test_knn_passes_cosine_similarity_through():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "matches": [
                    {"id": "qa_2", "score": 0.81, "metadata": {"question": "q2", "response": "r2"}},
                    {"id": "qa_1", "score": 0.97, "metadata": {"question": "q1", "response": "r1"}},
                ]
            },
        )

    out = asyncio.run(_repo(handler).knn(VEC, 5))

    assert seen["url"] == f"{HOST}/query"
    assert seen["body"]["topK"] == 5
    assert seen["body"]["includeMetadata"] is True
    assert seen["body"]["filter"] == {"type": {"$eq": "qa_pair"}}
    assert [(c.response, c.score) for c in out] == [("r1", 0.97), ("r2", 0.81)]
    assert all(c.tier == TierName.DURABLE for c in out)


def test_knn_drops_matches_missing_metadata():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "matches": [
                    {"id": "a", "score": 0.9, "metadata": {"question": "q", "response": "ra"}},
                    {"id": "b", "score": 0.95},
                    {"id": "c", "score": 0.8, "metadata": {"question": "q", "response": "rc"}},
                ]
            },
        )

    out = asyncio.run(_repo(handler).knn(VEC, 5))

    assert [c.response for c in out] == ["ra", "rc"]


def test_knn_drops_matches_without_numeric_score():
    repo = _repo(lambda r: httpx.Response(200, json={}))

    out = repo.parse_matches(
        {
            "matches": [
                {"id": "a", "metadata": {"question": "q", "response": "r"}},
                {"id": "b", "score": "0.9", "metadata": {"question": "q", "response": "r"}},
                "junk",
            ]
        }
    )

    assert out == []


def test_knn_drops_matches_with_non_object_metadata():
    repo = _repo(lambda r: httpx.Response(200, json={}))

    out = repo.parse_matches(
        {
            "matches": [
                {"id": "a", "score": 0.99, "metadata": "oops"},
                {"id": "b", "score": 0.98, "metadata": ["question", "response"]},
                {"id": "c", "score": 0.95, "metadata": {"question": "q", "response": "rc"}},
            ]
        }
    )

    assert [c.response for c in out] == ["rc"]


def test_knn_http_error_is_tier_error():
    repo = _repo(lambda r: httpx.Response(503, text="unavailable"))

    with pytest.raises(TierError) as exc:
        asyncio.run(repo.knn(VEC, 5))
    assert exc.value.tier == "durable"


def test_knn_transport_error_is_tier_error():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(TierError) as exc:
        asyncio.run(_repo(handler).knn(VEC, 5))
    assert exc.value.kind == "ConnectError"


def test_upsert_sends_vector_with_qa_metadata():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"upsertedCount": 1})

    entry = QAEntry(question="Why 502?", response="Upstream died.", embedding=VEC)
    vec_id = asyncio.run(_repo(handler).upsert(entry))

    assert seen["url"] == f"{HOST}/vectors/upsert"
    vector = seen["body"]["vectors"][0]
    assert vector["id"] == vec_id and vec_id.startswith("qa_")
    assert vector["values"] == VEC
    assert vector["metadata"]["question"] == "Why 502?"
    assert vector["metadata"]["response"] == "Upstream died."
    assert vector["metadata"]["type"] == "qa_pair"


def test_ensure_index_swallows_already_exists():
    def handler(request):
        assert str(request.url) == "https://api.pinecone.io/indexes"
        body = json.loads(request.content)
        assert body["metric"] == "cosine" and body["dimension"] == 4
        return httpx.Response(409, json={"error": {"code": "ALREADY_EXISTS"}})

    asyncio.run(_repo(handler).ensure_index())


def test_ensure_index_other_errors_are_fatal():
    repo = _repo(lambda r: httpx.Response(400, json={"error": {"code": "INVALID_ARGUMENT"}}))

    with pytest.raises(TierError):
        asyncio.run(repo.ensure_index())


def test_ensure_index_resolves_host_when_not_configured():
    calls = []

    def handler(request):
        calls.append((request.method, str(request.url)))
        if request.method == "POST" and request.url.path == "/indexes":
            return httpx.Response(201, json={"name": "qa-test"})
        if request.method == "GET":
            return httpx.Response(200, json={"host": "qa-test-abc.svc.pinecone.io"})
        return httpx.Response(200, json={"matches": []})

    repo = _repo(handler, index_host="")

    async def go():
        await repo.ensure_index()
        await repo.knn(VEC, 1)

    asyncio.run(go())

    assert ("GET", "https://api.pinecone.io/indexes/qa-test") in calls
    assert calls[-1] == ("POST", "https://qa-test-abc.svc.pinecone.io/query")
