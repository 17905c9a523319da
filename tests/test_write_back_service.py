import asyncio

from service.write_back_service import WriteBackCoordinator
from tests.fakes import FakeTier
from util.errors import TierError
from util.tasks import drain

VEC = [0.1, 0.2, 0.3, 0.4]


def test_record_answer_upserts_same_entry_into_both_tiers():
    fast, durable = FakeTier("fast"), FakeTier("durable")

    stored = asyncio.run(
        WriteBackCoordinator([fast, durable]).record_answer("Why OOMKilled?", "Memory limit.", VEC)
    )

    assert stored == {"fast": "fast-1", "durable": "durable-1"}
    for tier in (fast, durable):
        assert len(tier.upserts) == 1
        entry = tier.upserts[0]
        assert entry.question == "Why OOMKilled?"
        assert entry.response == "Memory limit."
        assert entry.embedding == VEC


def test_one_failing_tier_does_not_block_the_other():
    fast = FakeTier("fast", upsert_error=TierError("fast", "upsert", ConnectionError("down")))
    durable = FakeTier("durable")

    stored = asyncio.run(
        WriteBackCoordinator([fast, durable]).record_answer("q?", "a", VEC)
    )

    assert stored == {"fast": None, "durable": "durable-1"}
    assert len(durable.upserts) == 1


def test_unexpected_errors_are_absorbed_too():
    fast = FakeTier("fast", upsert_error=RuntimeError("bug"))
    durable = FakeTier("durable", upsert_error=TierError("durable", "upsert", TimeoutError()))

    stored = asyncio.run(WriteBackCoordinator([fast, durable]).record_answer("q?", "a", VEC))

    assert stored == {"fast": None, "durable": None}


def test_schedule_runs_in_background():
    fast, durable = FakeTier("fast"), FakeTier("durable")
    writer = WriteBackCoordinator([fast, durable])

    async def go():
        task = writer.schedule("q?", "a", VEC)
        await drain()
        return task.result()

    assert asyncio.run(go()) == {"fast": "fast-1", "durable": "durable-1"}
