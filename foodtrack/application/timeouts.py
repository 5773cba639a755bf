"""Best-effort timeouts.

Races an operation against a timer. When the timer wins the caller stops
waiting, but the operation is not cancelled: it keeps running and its
eventual result (or error) is dropped. This is not true cancellation.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class OperationTimedOut(Exception):
    """Timer won the race; the operation is still running."""

    def __init__(self, operation: str, timeout_s: float) -> None:
        super().__init__(f"{operation} timed out after {timeout_s}s")
        self.operation = operation
        self.timeout_s = timeout_s


def _discard_late_result(task: asyncio.Future) -> None:  # type: ignore[type-arg]
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug("Late result discarded", error=str(error))
    else:
        logger.debug("Late result discarded")


async def race_with_timeout(
    operation: Awaitable[T],
    timeout_s: float,
    name: str = "operation",
) -> T:
    """
    Await ``operation`` for at most ``timeout_s`` seconds.

    Args:
        operation: Coroutine or future to run
        timeout_s: Seconds before giving up
        name: Operation name for errors and logs

    Returns:
        The operation result if it finishes in time

    Raises:
        OperationTimedOut: If the timer wins (operation left running)
        Exception: Whatever the operation raised, if it finished in time
    """
    task = asyncio.ensure_future(operation)
    done, _ = await asyncio.wait({task}, timeout=timeout_s)

    if task in done:
        return task.result()

    task.add_done_callback(_discard_late_result)
    logger.warning("Operation timed out", operation=name, timeout_s=timeout_s)
    raise OperationTimedOut(name, timeout_s)
