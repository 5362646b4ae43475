"""
Deadline Wrapper - races an awaitable against a wall-clock budget.

Two budgets use this wrapper:
- the network budget around each registry request (cancel on expiry, which
  aborts the httpx request and releases its connection)
- the invocation budget around each tool call (detach on expiry; the
  handler keeps running in the background and its result is discarded)

Exactly one outcome is produced per call: the operation's result, the
operation's own exception, or UpstreamTimeoutError.

Pattern: Timeout with explicit detach of abandoned work
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from npm_helper.core.exceptions import UpstreamTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeadlineWrapper:
    """
    Runs awaitables under a deadline and owns the tasks it abandons.

    Abandoned tasks are kept referenced until they finish so the event loop
    does not garbage-collect them mid-flight, and their outcome is retrieved
    so no "exception was never retrieved" warnings leak.

    Example:
        >>> deadline = DeadlineWrapper()
        >>> response = await deadline.run(client.get(url), 15.0, label=url)
    """

    def __init__(self) -> None:
        self._detached: set[asyncio.Task] = set()

    @property
    def detached_count(self) -> int:
        """Number of abandoned tasks that have not finished yet."""
        return len(self._detached)

    async def run(
        self,
        operation: Awaitable[T],
        timeout_seconds: float,
        *,
        label: str,
        cancel_on_expiry: bool = True,
        timeout_message: Optional[str] = None,
    ) -> T:
        """
        Await operation for at most timeout_seconds.

        Args:
            operation: Coroutine or future to run.
            timeout_seconds: Budget in seconds.
            label: Name of the operation, used in the timeout message.
            cancel_on_expiry: Cancel the operation on expiry; when False the
                operation is detached and allowed to finish on its own.
            timeout_message: Overrides the default timeout message.

        Returns:
            The operation's result.

        Raises:
            UpstreamTimeoutError: If the budget elapses first.
            Exception: Whatever the operation itself raises.
        """
        task = asyncio.ensure_future(operation)
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_seconds)
        except asyncio.CancelledError:
            task.cancel()
            self._detach(task)
            raise

        if task in done:
            return task.result()

        if cancel_on_expiry:
            task.cancel()
            logger.warning(f"{label} exceeded {timeout_seconds:g}s, cancelled")
        else:
            logger.warning(
                f"{label} exceeded {timeout_seconds:g}s, left running in background"
            )
        self._detach(task)
        raise UpstreamTimeoutError(label, timeout_seconds, message=timeout_message)

    def _detach(self, task: asyncio.Task) -> None:
        if task.done():
            self._discard(task)
            return
        self._detached.add(task)
        task.add_done_callback(self._discard)

    def _discard(self, task: asyncio.Task) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(f"Discarded failure of abandoned task: {exc!r}")
        else:
            logger.debug("Discarded result of abandoned task")
