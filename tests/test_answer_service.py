import asyncio

import pytest

from model.qa import MatchCandidate
from service.answer_service import AnswerService
from service.embedding_service import EmbeddingResolver
from service.similarity_service import SimilarityCascade
from service.write_back_service import WriteBackCoordinator
from tests.fakes import FakeKV, FakeProvider, FakeTier
from util.enums import AnswerSource, TierName
from util.errors import ProviderError
from util.tasks import drain

VEC = [0.1, 0.2, 0.3, 0.4]


def _service(fast: FakeTier, durable: FakeTier, provider: FakeProvider) -> AnswerService:
    resolver = EmbeddingResolver(provider, FakeKV(), FakeKV())
    cascade = SimilarityCascade(fast, durable, threshold=0.92, backfill=False)
    return AnswerService(resolver, cascade, WriteBackCoordinator([fast, durable]), provider)


def _answer(service: AnswerService, question: str):
    async def go():
        out = await service.answer(question)
        await drain()
        return out

    return asyncio.run(go())


def test_full_miss_generates_and_writes_both_tiers():
    fast, durable = FakeTier("fast"), FakeTier("durable")
    provider = FakeProvider(embedding=VEC)

    out = _answer(_service(fast, durable, provider), "How do I drain a node?")

    assert out.source == AnswerSource.GENERATED
    assert out.text == "fresh answer to How do I drain a node?"
    assert provider.generated == ["How do I drain a node?"]
    for tier in (fast, durable):
        assert len(tier.upserts) == 1
        assert tier.upserts[0].question == "How do I drain a node?"
        assert tier.upserts[0].response == out.text
        assert tier.upserts[0].embedding == VEC


def test_hit_skips_generation_and_write_back():
    fast = FakeTier(
        "fast",
        [MatchCandidate(response="Redis stores data in-memory.", score=0.95, tier=TierName.FAST)],
    )
    durable = FakeTier("durable")
    provider = FakeProvider(embedding=VEC)

    out = _answer(_service(fast, durable, provider), "What is Redis?")

    assert out == ("Redis stores data in-memory.", AnswerSource.FAST, 0.95)
    assert provider.generated == []
    assert fast.upserts == [] and durable.upserts == []


def test_provider_failure_propagates():
    provider = FakeProvider(error=ProviderError("timeout"))

    with pytest.raises(ProviderError):
        _answer(_service(FakeTier("fast"), FakeTier("durable"), provider), "q?")
