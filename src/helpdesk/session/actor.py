"""Per-session actor serializing work through a queue."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class SessionActor:
    """Runs jobs for one session strictly one at a time, in submission order.

    Jobs are queued and executed by a single worker task, so two exchanges
    on the same session can never interleave their read-modify-write
    cycles. The worker exits once the queue is empty and is started again
    by the next submission. Callers await the job's result through a
    future; abandoning that future does not stop the job.
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self._queue: asyncio.Queue[tuple[Job, asyncio.Future[Any]]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._pending = 0

    @property
    def pending(self) -> int:
        """Jobs submitted but not yet finished."""
        return self._pending

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def _run(self) -> None:
        while not self._queue.empty():
            job, future = self._queue.get_nowait()
            try:
                result = await job()
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._pending -= 1

    def submit(self, job: Job) -> asyncio.Future[Any]:
        """Queue a job. Returns a future resolved with the job's result."""
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending += 1
        self._queue.put_nowait((job, future))
        if not self.running:
            self._worker = asyncio.create_task(
                self._run(), name=f"session-actor-{self.session_id}"
            )
        return future

    async def call(self, job: Job) -> Any:
        """Queue a job and wait for its result.

        Cancelling the caller does not cancel the job; it still runs to
        completion once its turn comes.
        """
        future = self.submit(job)
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            future.add_done_callback(self._report_abandoned)
            raise

    def _report_abandoned(self, future: asyncio.Future[Any]) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning(f"Session {self.session_id}: job failed after caller left: {error}")

    async def drain(self) -> None:
        """Wait until every queued job has finished."""
        while self.running:
            assert self._worker is not None
            await self._worker
