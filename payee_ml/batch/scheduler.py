"""Background polling of tracked batch jobs.

One asyncio task per job id. A task ends when the job reaches a terminal
state, when the API key is rejected, or when the job is explicitly stopped
or removed. Failed polls back off exponentially up to ``max_interval``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from payee_ml.exceptions import AuthError

if TYPE_CHECKING:
    from payee_ml.data_models import BatchJob, BatchJobRecord

    from .orchestrator import BatchOrchestrator

logger = logging.getLogger(__name__)

JobListener = Callable[["BatchJob"], Awaitable[None] | None]


@dataclass
class PollingState:
    is_polling: bool = False
    poll_count: int = 0
    consecutive_failures: int = 0
    last_error: str | None = None
    last_polled_at: datetime | None = None
    last_status: str | None = None


class PollScheduler:
    """Owns one poll loop per tracked batch job.

    Usage:
        scheduler = PollScheduler(orchestrator, interval=60.0)
        scheduler.start(job.id)
        await scheduler.refresh(job.id)   # manual poll, races are harmless
        await scheduler.stop(job.id)      # explicit user removal
        await scheduler.shutdown()        # process exit
        await scheduler.resume()          # after a restart
    """

    def __init__(
        self,
        orchestrator: BatchOrchestrator,
        interval: float = 60.0,
        max_interval: float = 600.0,
        on_update: JobListener | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._orchestrator = orchestrator
        self._interval = interval
        self._max_interval = max(max_interval, interval)
        self._on_update = on_update
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._states: dict[str, PollingState] = {}

    def start(self, job_id: str) -> None:
        """Start polling ``job_id`` unless a loop is already running."""
        if self.is_polling(job_id):
            return
        state = self._states.setdefault(job_id, PollingState())
        state.is_polling = True
        task = asyncio.create_task(self._loop(job_id), name=f"poll-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda t: self._forget(job_id, t))
        logger.info("Polling started for %s", job_id)

    async def resume(self) -> list[BatchJobRecord]:
        """Refresh every stored job and restart polling for the unfinished ones."""
        records = await self._orchestrator.load_tracked_jobs()
        for record in records:
            if record.last_error:
                self._states.setdefault(record.job.id, PollingState()).last_error = (
                    record.last_error
                )
            if not record.job.status.is_terminal:
                self.start(record.job.id)
        return records

    def is_polling(self, job_id: str) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    def state(self, job_id: str) -> PollingState:
        """Snapshot of the polling state (defaults if never polled)."""
        return replace(self._states.get(job_id) or PollingState())

    @property
    def active_jobs(self) -> list[str]:
        return [job_id for job_id in self._tasks if self.is_polling(job_id)]

    async def refresh(self, job_id: str) -> BatchJob:
        """Poll once now; restart the loop if the job is still active."""
        state = self._states.setdefault(job_id, PollingState())
        try:
            job = await self._orchestrator.poll(job_id)
        except Exception as e:
            state.last_error = str(e)
            raise
        self._record_success(state, job)
        await self._notify(job)
        if not job.status.is_terminal and not self.is_polling(job_id):
            self.start(job_id)
        return job

    async def stop(self, job_id: str) -> None:
        task = self._tasks.pop(job_id, None)
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.info("Polling stopped for %s", job_id)
        state = self._states.get(job_id)
        if state is not None:
            state.is_polling = False

    async def forget(self, job_id: str) -> None:
        """Stop polling and drop all state for a removed job."""
        await self.stop(job_id)
        self._states.pop(job_id, None)

    async def shutdown(self) -> None:
        for job_id in list(self._tasks):
            await self.stop(job_id)

    async def _loop(self, job_id: str) -> None:
        state = self._states[job_id]
        delay = 0.0
        try:
            while True:
                if delay:
                    await self._sleep(delay)
                try:
                    job = await self._orchestrator.poll(job_id)
                except AuthError as e:
                    state.last_error = str(e)
                    logger.error("Polling %s stopped: %s", job_id, e)
                    return
                except Exception as e:
                    state.consecutive_failures += 1
                    state.last_error = str(e) or type(e).__name__
                    delay = min(
                        self._interval * 2**state.consecutive_failures,
                        self._max_interval,
                    )
                    logger.warning(
                        "Poll %d for %s failed (%s), next attempt in %.0fs",
                        state.consecutive_failures,
                        job_id,
                        state.last_error,
                        delay,
                    )
                    continue

                self._record_success(state, job)
                await self._notify(job)
                if job.status.is_terminal:
                    logger.info(
                        "Batch job %s reached %s, polling done",
                        job_id,
                        job.status.value,
                    )
                    return
                delay = self._interval
        finally:
            state.is_polling = False

    @staticmethod
    def _record_success(state: PollingState, job: BatchJob) -> None:
        state.poll_count += 1
        state.consecutive_failures = 0
        state.last_error = None
        state.last_polled_at = datetime.now(UTC)
        state.last_status = job.status.value

    async def _notify(self, job: BatchJob) -> None:
        if self._on_update is None:
            return
        try:
            outcome = self._on_update(job)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Job update listener failed for %s", job.id)

    def _forget(self, job_id: str, task: asyncio.Task[None]) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]
