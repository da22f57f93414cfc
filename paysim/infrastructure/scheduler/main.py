"""
Delayed task scheduling for the simulator.

Webhook deliveries, dispute creation and ``invoice.paid`` events all run after
the request that triggered them has returned. Services schedule that work
through ``DelayedTaskScheduler``:

- ``APSchedulerTaskScheduler`` runs one-shot jobs on the event loop with
  APScheduler's ``AsyncIOScheduler``; this is what the server uses.
- ``ManualTaskScheduler`` keeps a simulated clock that tests advance explicitly,
  so delayed effects fire deterministically without sleeping.

A scheduled task always fires exactly once; there is no cancellation. Failures
inside a task are logged and never propagate. ``APSchedulerTaskScheduler`` drops
tasks, with a warning, while it is not running (``ENABLE_SCHEDULER=false``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import heapq
import inspect
import itertools
import time
from typing import Any, Awaitable, Callable
import uuid

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from paysim.core.config import scheduler_logger

TaskFunc = Callable[..., Awaitable[Any] | Any]


async def run_task(func: TaskFunc, args: tuple, name: str | None = None) -> None:
    """
    Run a scheduled task, awaiting it if it is a coroutine.

    Exceptions are logged and swallowed: delayed effects must never reach the
    caller that scheduled them.
    """
    task_name = name or getattr(func, "__name__", repr(func))
    try:
        result = func(*args)
        if inspect.isawaitable(result):
            await result
        scheduler_logger.debug(f"Task '{task_name}' completed")
    except Exception as e:
        scheduler_logger.exception(f"Task '{task_name}' failed: {e}")


class DelayedTaskScheduler(ABC):
    """Runs callables after a delay, outside the caller's synchronous path."""

    @abstractmethod
    def schedule(
        self, delay: float, func: TaskFunc, *args: Any, name: str | None = None
    ) -> None:
        """
        Schedule ``func(*args)`` to run ``delay`` seconds from now.

        Tasks with equal due times run in submission order.

        Args:
            delay: Seconds to wait; zero or negative means "as soon as possible".
            func: A plain function or a coroutine function.
            *args: Positional arguments for ``func``.
            name: Optional name for logging.
        """

    def start(self) -> None:
        """Start executing tasks. No-op by default."""

    def shutdown(self) -> None:
        """Stop executing tasks. No-op by default."""


class APSchedulerTaskScheduler(DelayedTaskScheduler):
    """
    Runs tasks as one-shot APScheduler jobs on the running asyncio loop.

    Every job is the ``run_task`` coroutine, so synchronous task bodies execute
    on the event loop thread rather than in a worker thread, which keeps store
    mutations single-threaded.
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None):
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            scheduler_logger.info("Delayed task scheduler started.")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            scheduler_logger.info("Delayed task scheduler stopped.")

    def schedule(
        self, delay: float, func: TaskFunc, *args: Any, name: str | None = None
    ) -> None:
        if not self._scheduler.running:
            task_name = name or getattr(func, "__name__", repr(func))
            scheduler_logger.warning(
                f"Scheduler is not running, task '{task_name}' will not be run"
            )
            return
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay, 0.0))
        job_id = f"task_{uuid.uuid4().hex}"
        self._scheduler.add_job(
            run_task,
            trigger=DateTrigger(run_date=run_date, timezone=timezone.utc),
            args=[func, args, name],
            id=job_id,
            name=name or job_id,
            misfire_grace_time=None,  # late is fine, skipped is not
            coalesce=False,
        )
        scheduler_logger.debug(f"Scheduled '{name or job_id}' for {run_date}")


@dataclass(order=True)
class _ScheduledTask:
    due: float
    sequence: int
    func: TaskFunc = field(compare=False)
    args: tuple = field(compare=False)
    name: str | None = field(compare=False, default=None)


class ManualTaskScheduler(DelayedTaskScheduler):
    """
    Scheduler driven by a simulated clock.

    Nothing runs until the test calls ``advance``/``run_pending``. Tasks
    scheduled while advancing run in the same call if they fall due before the
    target time.

    Example:
        scheduler = ManualTaskScheduler()
        ...create a subscription...
        await scheduler.run_pending()  # subscription.created delivered
        await scheduler.advance(3)     # invoice.paid delivered
    """

    def __init__(self, start_time: float | None = None):
        self.now: float = time.time() if start_time is None else start_time
        self._queue: list[_ScheduledTask] = []
        self._sequence = itertools.count()

    @property
    def pending(self) -> int:
        """Number of tasks not yet run."""
        return len(self._queue)

    def schedule(
        self, delay: float, func: TaskFunc, *args: Any, name: str | None = None
    ) -> None:
        heapq.heappush(
            self._queue,
            _ScheduledTask(
                due=self.now + max(delay, 0.0),
                sequence=next(self._sequence),
                func=func,
                args=args,
                name=name,
            ),
        )

    async def advance(self, seconds: float = 0.0) -> int:
        """
        Move the simulated clock forward, running every task that falls due.

        Returns:
            int: Number of tasks run.
        """
        target = self.now + max(seconds, 0.0)
        ran = 0
        while self._queue and self._queue[0].due <= target:
            task = heapq.heappop(self._queue)
            self.now = max(self.now, task.due)
            await run_task(task.func, task.args, task.name)
            ran += 1
        self.now = target
        return ran

    async def run_pending(self) -> int:
        """Run every task that is due at the current simulated time."""
        return await self.advance(0.0)


__all__ = [
    "TaskFunc",
    "run_task",
    "DelayedTaskScheduler",
    "APSchedulerTaskScheduler",
    "ManualTaskScheduler",
]
