from __future__ import annotations

import asyncio

import pytest

from shopify_sitemap.core.scheduler import UpdateScheduler
from tests.test_utils.fakes import RecordingSink


class CountingJob:
    def __init__(self) -> None:
        self.calls = 0
        self.called = asyncio.Event()

    async def __call__(self) -> None:
        self.calls += 1
        self.called.set()


class TestUpdateSchedulerValidation:
    def test_zero_interval_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="interval_seconds must be positive"):
            UpdateScheduler(0, CountingJob())

    def test_negative_interval_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="interval_seconds must be positive"):
            UpdateScheduler(-1, CountingJob())

    def test_non_callable_job_raises_type_error(self) -> None:
        with pytest.raises(TypeError, match="job must be callable"):
            UpdateScheduler(1, object())  # type: ignore[arg-type]


class TestUpdateSchedulerRun:
    async def test_runs_immediately_when_requested(self) -> None:
        job = CountingJob()
        scheduler = UpdateScheduler(60, job, run_immediately=True)

        await scheduler.start()
        await asyncio.wait_for(job.called.wait(), timeout=1)
        await scheduler.shutdown()

        assert job.calls == 1

    async def test_waits_one_interval_by_default(self) -> None:
        job = CountingJob()
        scheduler = UpdateScheduler(60, job)

        await scheduler.start()
        await asyncio.sleep(0.01)
        await scheduler.shutdown()

        assert job.calls == 0

    async def test_repeats_every_interval(self) -> None:
        job = CountingJob()
        scheduler = UpdateScheduler(0.01, job)

        await scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.shutdown()

        assert job.calls >= 2

    async def test_running_flag_and_stop_event(self) -> None:
        sink = RecordingSink()
        scheduler = UpdateScheduler(60, CountingJob(), sink=sink)

        await scheduler.start()
        assert scheduler.running is True

        await scheduler.shutdown()

        assert scheduler.running is False
        assert sink.names("info") == ["scheduler_stopped"]

    async def test_start_twice_keeps_one_task(self) -> None:
        job = CountingJob()
        scheduler = UpdateScheduler(60, job, run_immediately=True)

        await scheduler.start()
        await scheduler.start()
        await asyncio.wait_for(job.called.wait(), timeout=1)
        await scheduler.shutdown()

        assert job.calls == 1

    async def test_shutdown_without_start_is_noop(self) -> None:
        await UpdateScheduler(60, CountingJob()).shutdown()


class TestUpdateSchedulerDynamicInterval:
    async def test_interval_is_read_before_every_cycle(self) -> None:
        job = CountingJob()
        intervals = iter([60.0, 0.01, 0.01, 0.01])
        asked: list[float] = []

        def interval() -> float:
            value = next(intervals, 60.0)
            asked.append(value)
            return value

        scheduler = UpdateScheduler(interval, job, run_immediately=True)

        await scheduler.start()
        await asyncio.wait_for(job.called.wait(), timeout=1)
        await asyncio.sleep(0.05)
        await scheduler.shutdown()

        assert job.calls == 1
        assert asked == [60.0]

    async def test_shorter_interval_applies_on_next_cycle(self) -> None:
        job = CountingJob()
        current = {"seconds": 0.01}
        scheduler = UpdateScheduler(lambda: current["seconds"], job)

        await scheduler.start()
        await asyncio.sleep(0.1)
        current["seconds"] = 60.0
        await asyncio.sleep(0.05)
        calls = job.calls
        await asyncio.sleep(0.05)
        await scheduler.shutdown()

        assert calls >= 2
        assert job.calls == calls

    def test_callable_interval_is_not_called_on_construction(self) -> None:
        asked: list[int] = []

        UpdateScheduler(lambda: asked.append(1) or 60.0, CountingJob())

        assert asked == []
