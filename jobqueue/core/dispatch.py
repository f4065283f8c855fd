"""
Bounded FIFO that conveys job ids from producers to workers.
"""

import asyncio

from jobqueue.exceptions import DispatchQueueClosed

# Marks closure inside the underlying queue. Each consumer that reads it puts
# it back so every other waiting consumer wakes up as well.
_CLOSED = object()


class DispatchQueue:
    """
    Fixed-capacity dispatch queue with fail-fast admission.

    Producers never wait: ``submit`` either enqueues immediately or reports
    rejection. Consumers await ``get`` until an id arrives or the queue is
    closed and drained. Ids queued before ``close`` are still delivered.

    The underlying asyncio queue is unbounded; capacity is enforced by
    ``submit`` so that the closure marker always fits.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self._pending = 0

    @property
    def capacity(self) -> int:
        """Maximum number of undelivered ids."""
        return self._capacity

    @property
    def closed(self) -> bool:
        """Whether the queue refuses new submissions."""
        return self._closed

    def qsize(self) -> int:
        """Number of ids waiting for delivery."""
        return self._pending

    def full(self) -> bool:
        """Whether a submit would be rejected for lack of capacity."""
        return self._pending >= self._capacity

    def submit(self, job_id: str) -> bool:
        """
        Enqueue a job id without blocking.

        Args:
            job_id: Id of a job already held by the store.

        Returns:
            True if accepted, False if the queue is full or closed.
        """
        if self._closed or self.full():
            return False
        self._queue.put_nowait(job_id)
        self._pending += 1
        return True

    async def get(self) -> str:
        """
        Wait for the next job id in FIFO order.

        Returns:
            The next job id.

        Raises:
            DispatchQueueClosed: Once the queue is closed and drained.
        """
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise DispatchQueueClosed()
        self._pending -= 1
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Refuse further submissions and wake all waiting consumers."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
