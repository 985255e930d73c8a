"""Helpers for invoking user hooks that may be sync or async."""

import asyncio
import inspect
import logging
from typing import Any

logger = logging.getLogger(__name__)


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def _log_task_failure(task: "asyncio.Future[Any]", what: str) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"{what} failed: {exc}", exc_info=exc)


def fire_and_forget(hook: Any, *args: Any, what: str = "hook") -> None:
    """Call ``hook`` without waiting for its result.

    Awaitable results are scheduled on the running loop; failures, sync or
    async, are logged and never propagate to the caller.
    """
    try:
        result = hook(*args)
    except Exception as e:
        logger.error(f"{what} failed: {e}", exc_info=True)
        return

    if not inspect.isawaitable(result):
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        if inspect.iscoroutine(result):
            result.close()
        logger.warning(f"{what} returned an awaitable but no event loop is running")
        return

    task = asyncio.ensure_future(result, loop=loop)
    task.add_done_callback(lambda t: _log_task_failure(t, what))
