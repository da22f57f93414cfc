"""
Test suite for the delayed task schedulers.

Run tests:
    pytest tests/infrastructure/scheduler/test_main.py -v
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from paysim.infrastructure.scheduler import (
    APSchedulerTaskScheduler,
    ManualTaskScheduler,
    run_task,
)


class TestRunTask:

    @pytest.mark.asyncio
    async def test_runs_sync_function(self):
        calls = []
        await run_task(calls.append, (1,))
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_awaits_coroutine_function(self):
        calls = []

        async def task(value):
            calls.append(value)

        await run_task(task, ("x",))
        assert calls == ["x"]

    @pytest.mark.asyncio
    async def test_failures_are_logged_not_raised(self):
        def boom():
            raise RuntimeError("boom")

        with patch("paysim.infrastructure.scheduler.main.scheduler_logger") as mock_logger:
            await run_task(boom, (), name="boom-task")

            mock_logger.exception.assert_called_once()
            assert "boom-task" in mock_logger.exception.call_args[0][0]


class TestManualTaskScheduler:

    @pytest.mark.asyncio
    async def test_nothing_runs_until_advanced(self):
        scheduler = ManualTaskScheduler(start_time=1000.0)
        calls = []
        scheduler.schedule(0, calls.append, "now")

        assert calls == []
        assert scheduler.pending == 1

        assert await scheduler.run_pending() == 1
        assert calls == ["now"]
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_delayed_tasks_fire_when_due(self):
        scheduler = ManualTaskScheduler(start_time=1000.0)
        calls = []
        scheduler.schedule(3, calls.append, "later")

        await scheduler.advance(2.9)
        assert calls == []

        await scheduler.advance(0.1)
        assert calls == ["later"]
        assert scheduler.now == pytest.approx(1003.0)

    @pytest.mark.asyncio
    async def test_equal_due_times_run_in_submission_order(self):
        scheduler = ManualTaskScheduler(start_time=0.0)
        calls = []
        for value in ("a", "b", "c"):
            scheduler.schedule(1, calls.append, value)

        await scheduler.advance(1)
        assert calls == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_tasks_scheduled_while_advancing_run_if_due(self):
        scheduler = ManualTaskScheduler(start_time=0.0)
        calls = []

        def chain():
            calls.append("first")
            scheduler.schedule(1, calls.append, "second")

        scheduler.schedule(1, chain)
        await scheduler.advance(5)

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_failing_task_does_not_stop_others(self):
        scheduler = ManualTaskScheduler(start_time=0.0)
        calls = []

        def boom():
            raise RuntimeError("boom")

        scheduler.schedule(0, boom)
        scheduler.schedule(0, calls.append, "after")

        assert await scheduler.run_pending() == 2
        assert calls == ["after"]


class TestAPSchedulerTaskScheduler:

    def test_schedule_adds_one_shot_job(self):
        mock_scheduler = MagicMock()
        mock_scheduler.running = True
        scheduler = APSchedulerTaskScheduler(mock_scheduler)

        scheduler.schedule(3, print, "hello", name="greeting")

        mock_scheduler.add_job.assert_called_once()
        call_kwargs = mock_scheduler.add_job.call_args.kwargs
        assert call_kwargs["args"] == [print, ("hello",), "greeting"]
        assert call_kwargs["name"] == "greeting"
        assert call_kwargs["misfire_grace_time"] is None

    def test_schedule_while_stopped_warns_and_drops_task(self):
        mock_scheduler = MagicMock()
        mock_scheduler.running = False
        scheduler = APSchedulerTaskScheduler(mock_scheduler)

        with patch(
            "paysim.infrastructure.scheduler.main.scheduler_logger"
        ) as mock_logger:
            scheduler.schedule(3, print, "hello", name="greeting")

        mock_scheduler.add_job.assert_not_called()
        mock_logger.warning.assert_called_once_with(
            "Scheduler is not running, task 'greeting' will not be run"
        )

    def test_start_and_shutdown_are_idempotent(self):
        mock_scheduler = MagicMock()
        mock_scheduler.running = False
        scheduler = APSchedulerTaskScheduler(mock_scheduler)

        scheduler.start()
        mock_scheduler.start.assert_called_once()

        mock_scheduler.running = True
        scheduler.start()
        mock_scheduler.start.assert_called_once()

        scheduler.shutdown()
        mock_scheduler.shutdown.assert_called_once_with(wait=False)

    @pytest.mark.asyncio
    async def test_runs_task_on_event_loop(self):
        scheduler = APSchedulerTaskScheduler()
        done = asyncio.Event()
        scheduler.start()
        try:
            scheduler.schedule(0, done.set, name="set-event")
            await asyncio.wait_for(done.wait(), timeout=5)
        finally:
            scheduler.shutdown()

        assert done.is_set()
