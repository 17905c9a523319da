import asyncio
import logging
from typing import Any, Coroutine, Set

logger = logging.getLogger(__name__)

# Strong references; the event loop only keeps weak ones.
_pending: Set["asyncio.Task[Any]"] = set()


def _on_done(task: "asyncio.Task[Any]") -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.warning("task.cancelled name=%s", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "task.failed name=%s err=%s: %s", task.get_name(), type(exc).__name__, exc
        )


def spawn(coro: Coroutine[Any, Any, Any], name: str) -> "asyncio.Task[Any]":
    """
    Run `coro` in the background without awaiting it. Failures are logged,
    never propagated to the caller.
    """
    task = asyncio.create_task(coro, name=name)
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


async def drain(timeout: float = 5.0) -> None:
    """Wait for in-flight background work (shutdown and tests)."""
    if not _pending:
        return
    await asyncio.wait(set(_pending), timeout=timeout)
