from paysim.infrastructure.scheduler.main import (
    APSchedulerTaskScheduler,
    DelayedTaskScheduler,
    ManualTaskScheduler,
    run_task,
)

__all__ = [
    "DelayedTaskScheduler",
    "APSchedulerTaskScheduler",
    "ManualTaskScheduler",
    "run_task",
]
