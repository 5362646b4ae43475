"""
Paced Gate - FIFO admission control for registry requests.

Every network call made by a tool handler first awaits PacedGate.acquire().
The gate releases waiters strictly in arrival order and never releases two
of them closer together than the minimum interval derived from the
requests-per-second budget. Bursts are queued and self-pace; nothing is
rejected.

The gate is single-process and in-memory. It relies on the asyncio event
loop being single-threaded, so the queue is never touched concurrently.

Pattern: Leaky bucket with a FIFO waiter queue
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class _Waiter:
    future: asyncio.Future
    enqueued_at: float


class PacedGate:
    """
    Serializes and paces calls to a shared upstream.

    Attributes:
        requests_per_second: Configured budget.
        min_interval: Minimum spacing in seconds between two releases.

    Example:
        >>> gate = PacedGate(requests_per_second=2)
        >>> await gate.acquire()  # returns when it is this caller's turn
    """

    def __init__(self, requests_per_second: float = 2.0) -> None:
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        self.requests_per_second = requests_per_second
        self.min_interval = 1.0 / requests_per_second
        self._waiters: deque[_Waiter] = deque()
        self._last_dispatch: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._dispatched = 0

    @property
    def pending(self) -> int:
        """Number of waiters still queued."""
        return len(self._waiters)

    @property
    def dispatched(self) -> int:
        """Number of waiters released since creation."""
        return self._dispatched

    async def acquire(self) -> None:
        """
        Wait until this caller may start its request.

        A caller cancelled while queued is skipped when its turn comes and
        does not consume a slot.
        """
        loop = asyncio.get_running_loop()
        waiter = _Waiter(future=loop.create_future(), enqueued_at=loop.time())
        self._waiters.append(waiter)
        if len(self._waiters) > 1:
            logger.debug(f"Paced gate busy: {self.pending} waiters queued")
        self._process_queue()
        await waiter.future

    def _process_queue(self) -> None:
        """Release the head waiter if spacing allows, otherwise arm the timer."""
        if self._timer is not None:
            # A release is already scheduled; it will pick up new waiters.
            return

        while self._waiters and self._waiters[0].future.done():
            self._waiters.popleft()
        if not self._waiters:
            return

        loop = asyncio.get_running_loop()
        now = loop.time()
        if self._last_dispatch is None:
            wait = 0.0
        else:
            wait = self.min_interval - (now - self._last_dispatch)

        if wait <= 0:
            waiter = self._waiters.popleft()
            self._last_dispatch = now
            self._dispatched += 1
            waiter.future.set_result(None)
            logger.debug(f"Paced gate released waiter after {now - waiter.enqueued_at:.3f}s")
            if self._waiters:
                self._arm(loop, self.min_interval)
        else:
            self._arm(loop, wait)

    def _arm(self, loop: asyncio.AbstractEventLoop, delay: float) -> None:
        self._timer = loop.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._process_queue()
