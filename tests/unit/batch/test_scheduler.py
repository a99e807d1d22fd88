"""Tests for background polling of batch jobs."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from payee_ml.batch import PollScheduler
from payee_ml.data_models import BatchJob, BatchJobRecord, BatchStatus
from payee_ml.exceptions import AuthError, TransientUpstreamError

JOB_ID = "batch_abc123def456"


def job(status: str) -> BatchJob:
    return BatchJob(id=JOB_ID, status=BatchStatus(status))


class RecordingSleep:
    """Records requested delays and yields control instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


def make_scheduler(
    *polls: BatchJob | Exception, **kwargs: object
) -> tuple[PollScheduler, MagicMock, RecordingSleep]:
    orchestrator = MagicMock()
    orchestrator.poll = AsyncMock(side_effect=list(polls))
    sleep = RecordingSleep()
    scheduler = PollScheduler(
        orchestrator, interval=10.0, max_interval=25.0, sleep=sleep, **kwargs
    )
    return scheduler, orchestrator, sleep


async def until_idle(scheduler: PollScheduler, job_id: str = JOB_ID) -> None:
    for _ in range(100):
        if not scheduler.is_polling(job_id):
            return
        await asyncio.sleep(0)
    raise AssertionError(f"Still polling {job_id}")


class TestPollLoop:
    @pytest.mark.asyncio
    async def test_polls_until_terminal(self) -> None:
        scheduler, orchestrator, sleep = make_scheduler(
            job("validating"), job("in_progress"), job("completed")
        )

        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        assert orchestrator.poll.await_count == 3
        assert sleep.delays == [10.0, 10.0]
        state = scheduler.state(JOB_ID)
        assert not state.is_polling
        assert state.poll_count == 3
        assert state.last_status == "completed"
        assert state.last_polled_at is not None
        assert scheduler.active_jobs == []

    @pytest.mark.asyncio
    async def test_failures_back_off_up_to_the_cap(self) -> None:
        scheduler, orchestrator, sleep = make_scheduler(
            TransientUpstreamError("502"),
            TransientUpstreamError("502"),
            job("failed"),
        )

        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        assert sleep.delays == [20.0, 25.0]
        state = scheduler.state(JOB_ID)
        assert state.consecutive_failures == 0
        assert state.last_error is None
        assert state.last_status == "failed"

    @pytest.mark.asyncio
    async def test_failure_state_is_visible_while_polling(self) -> None:
        scheduler, _, _ = make_scheduler(TransientUpstreamError("502"), job("completed"))
        scheduler.start(JOB_ID)
        await asyncio.sleep(0)

        state = scheduler.state(JOB_ID)

        assert state.consecutive_failures == 1
        assert state.last_error == "502"
        await until_idle(scheduler)

    @pytest.mark.asyncio
    async def test_rejected_key_stops_polling(self) -> None:
        scheduler, orchestrator, sleep = make_scheduler(AuthError("bad key"))

        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        assert orchestrator.poll.await_count == 1
        assert sleep.delays == []
        assert scheduler.state(JOB_ID).last_error == "bad key"

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self) -> None:
        scheduler, orchestrator, _ = make_scheduler(job("completed"))

        scheduler.start(JOB_ID)
        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        assert orchestrator.poll.await_count == 1

    @pytest.mark.asyncio
    async def test_listener_sees_every_update(self) -> None:
        seen: list[str] = []

        async def listener(update: BatchJob) -> None:
            seen.append(update.status.value)

        scheduler, _, _ = make_scheduler(
            job("in_progress"), job("completed"), on_update=listener
        )

        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        assert seen == ["in_progress", "completed"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_polling(self) -> None:
        listener = MagicMock(side_effect=RuntimeError("boom"))
        scheduler, orchestrator, _ = make_scheduler(
            job("in_progress"), job("completed"), on_update=listener
        )

        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        assert listener.call_count == 2
        assert orchestrator.poll.await_count == 2


class TestControl:
    @pytest.mark.asyncio
    async def test_stop_cancels_the_loop(self) -> None:
        scheduler, orchestrator, _ = make_scheduler()
        orchestrator.poll = AsyncMock(return_value=job("in_progress"))
        scheduler.start(JOB_ID)
        await asyncio.sleep(0)

        await scheduler.stop(JOB_ID)

        assert not scheduler.is_polling(JOB_ID)
        assert not scheduler.state(JOB_ID).is_polling
        assert scheduler.state(JOB_ID).poll_count >= 1

    @pytest.mark.asyncio
    async def test_forget_drops_state(self) -> None:
        scheduler, _, _ = make_scheduler(job("completed"))
        scheduler.start(JOB_ID)
        await until_idle(scheduler)

        await scheduler.forget(JOB_ID)

        assert scheduler.state(JOB_ID).poll_count == 0

    @pytest.mark.asyncio
    async def test_shutdown_stops_everything(self) -> None:
        scheduler, orchestrator, _ = make_scheduler()
        orchestrator.poll = AsyncMock(side_effect=lambda job_id: job("in_progress"))
        scheduler.start(JOB_ID)
        scheduler.start("batch_fedcba987654")
        await asyncio.sleep(0)

        await scheduler.shutdown()

        assert scheduler.active_jobs == []

    @pytest.mark.asyncio
    async def test_refresh_restarts_an_active_job(self) -> None:
        scheduler, orchestrator, _ = make_scheduler(
            job("in_progress"), job("completed")
        )

        refreshed = await scheduler.refresh(JOB_ID)

        assert refreshed.status is BatchStatus.IN_PROGRESS
        assert scheduler.is_polling(JOB_ID)
        await until_idle(scheduler)
        assert orchestrator.poll.await_count == 2

    @pytest.mark.asyncio
    async def test_refresh_of_terminal_job_does_not_poll_again(self) -> None:
        scheduler, orchestrator, _ = make_scheduler(job("cancelled"))

        await scheduler.refresh(JOB_ID)

        assert not scheduler.is_polling(JOB_ID)
        assert orchestrator.poll.await_count == 1
        assert scheduler.state(JOB_ID).last_status == "cancelled"

    @pytest.mark.asyncio
    async def test_refresh_failure_is_recorded(self) -> None:
        scheduler, _, _ = make_scheduler(TransientUpstreamError("down"))

        with pytest.raises(TransientUpstreamError):
            await scheduler.refresh(JOB_ID)

        assert scheduler.state(JOB_ID).last_error == "down"


def record(job_id: str, status: str, last_error: str | None = None) -> BatchJobRecord:
    return BatchJobRecord(
        job=BatchJob(id=job_id, status=BatchStatus(status)),
        payee_names=["Acme LLC"],
        created_at=datetime.now(UTC),
        last_error=last_error,
    )


class TestResume:
    @pytest.mark.asyncio
    async def test_only_unfinished_jobs_are_polled(self) -> None:
        active, done = "batch_active000001", "batch_done00000001"
        scheduler, orchestrator, _ = make_scheduler(job("completed"))
        orchestrator.load_tracked_jobs = AsyncMock(
            return_value=[record(active, "in_progress"), record(done, "completed")]
        )

        records = await scheduler.resume()

        assert [r.job.id for r in records] == [active, done]
        assert scheduler.is_polling(active)
        assert not scheduler.is_polling(done)
        await until_idle(scheduler, active)
        orchestrator.poll.assert_awaited_once_with(active)

    @pytest.mark.asyncio
    async def test_refresh_error_is_surfaced(self) -> None:
        scheduler, orchestrator, _ = make_scheduler(job("completed"))
        orchestrator.load_tracked_jobs = AsyncMock(
            return_value=[record(JOB_ID, "expired", last_error="No such batch")]
        )

        await scheduler.resume()

        assert not scheduler.is_polling(JOB_ID)
        assert scheduler.state(JOB_ID).last_error == "No such batch"
        orchestrator.poll.assert_not_called()
