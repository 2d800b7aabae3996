"""
Background task executor for fire-and-forget work (notification emails).

Work handed to submit() runs as an asyncio task on the running loop. The
caller never awaits it: the HTTP response goes out while the email is still
being sent. Failures are logged and dropped, never retried, and never reach
the request that scheduled them.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

# Strong references so pending tasks are not garbage-collected mid-flight
_tasks: set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _tasks.discard(task)
    if task.cancelled():
        logger.warning(f"Background task {task.get_name()} was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}", exc_info=exc)


def submit(func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> asyncio.Task:
    """
    Schedule `func(*args, **kwargs)` without awaiting it.

    Must be called from within a running event loop (any async route).
    """
    task = asyncio.get_running_loop().create_task(
        func(*args, **kwargs),
        name=f"bg:{getattr(func, '__name__', 'task')}",
    )
    _tasks.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_count() -> int:
    return len(_tasks)


async def drain(timeout: float | None = 10.0) -> None:
    """
    Wait for outstanding background tasks (app shutdown, tests).

    Tasks still running after `timeout` seconds are left to the loop teardown.
    """
    if not _tasks:
        return
    pending = list(_tasks)
    logger.info(f"Waiting for {len(pending)} background task(s)")
    done, still_pending = await asyncio.wait(pending, timeout=timeout)
    if still_pending:
        logger.warning(f"{len(still_pending)} background task(s) still running at shutdown")
