"""FIFO request scheduler enforcing a minimum interval between outbound calls."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RequestScheduler:
    """
    Serialize async calls through a single worker.

    - Tasks run in submission order, one at a time.
    - Consecutive task starts are at least ``min_interval`` seconds apart.
    - The worker starts on the first submission and exits when the queue is
      empty; the next submission starts a new one.
    - A failing task fails only its own future; the queue keeps draining. This
      includes a task that raises CancelledError itself.
    """

    def __init__(
        self,
        min_interval: float = 0.25,
        *,
        task_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self.task_timeout = task_timeout
        self._clock = clock
        self._queue: deque[tuple[Callable[[], Awaitable[Any]], asyncio.Future[Any]]] = deque()
        self._worker: asyncio.Task[None] | None = None
        self._last_dispatch: float | None = None
        self._inflight: asyncio.Future[Any] | None = None

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def submit(self, task: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """Enqueue a task factory; the returned future resolves with its outcome."""
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[T] = loop.create_future()
        self._queue.append((task, fut))

        if not self.running:
            self._worker = loop.create_task(self._drain(), name="request-scheduler")
        return fut

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        return await self.submit(task)

    async def _drain(self) -> None:
        while self._queue:
            if self._last_dispatch is not None:
                wait = self.min_interval - (self._clock() - self._last_dispatch)
                if wait > 0:
                    await asyncio.sleep(wait)

            task, fut = self._queue.popleft()
            if fut.done():
                # cancelled by the caller while queued
                continue

            self._last_dispatch = self._clock()
            self._inflight = fut
            try:
                if self.task_timeout is not None:
                    result = await asyncio.wait_for(task(), timeout=self.task_timeout)
                else:
                    result = await task()
            except asyncio.CancelledError:
                if self._worker_cancelled():
                    if not fut.done():
                        fut.set_exception(RuntimeError("Request scheduler closed"))
                    raise
                # the task cancelled itself; only its own caller fails
                logger.error("Queued request was cancelled")
                if not fut.done():
                    fut.set_exception(RuntimeError("Queued request was cancelled"))
            except Exception as e:
                logger.error("Error processing queued request: %s", e)
                if not fut.done():
                    fut.set_exception(e)
            else:
                if not fut.done():
                    fut.set_result(result)
            finally:
                self._inflight = None

    @staticmethod
    def _worker_cancelled() -> bool:
        current = asyncio.current_task()
        return current is not None and current.cancelling() > 0

    async def aclose(self) -> None:
        """Stop the worker and fail whatever is still queued."""
        while self._queue:
            _, fut = self._queue.popleft()
            if not fut.done():
                fut.set_exception(RuntimeError("Request scheduler closed"))

        inflight = self._inflight
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        if inflight is not None and not inflight.done():
            inflight.set_exception(RuntimeError("Request scheduler closed"))
        self._worker = None
