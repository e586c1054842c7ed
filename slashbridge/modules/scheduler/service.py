"""Recurring job scheduler backed by APScheduler.

Jobs run on the asyncio loop, never overlap with themselves, and missed runs
are coalesced into one.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any, Callable, Coroutine, Optional
from uuid import uuid4

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from slashbridge.logging_config import get_logger

logger = get_logger(__name__)

AsyncTask = Callable[..., Coroutine[Any, Any, Any]]

_SHUTDOWN_POLLS = 100


class ScheduledTask:
    """Metadata about a scheduled task."""

    def __init__(self, task_id: str, name: str, schedule_info: str) -> None:
        self.task_id = task_id
        self.name = name
        self.schedule_info = schedule_info
        self.last_run: Optional[dt.datetime] = None
        self.run_count: int = 0


class SchedulerService:
    """Runs recurring background jobs such as the command sync."""

    def __init__(self) -> None:
        self._scheduler = AsyncIOScheduler(
            job_defaults={
                "misfire_grace_time": 30,
                "coalesce": True,
                "max_instances": 1,
            },
        )
        self._tasks: dict[str, ScheduledTask] = {}
        self._listener_added = False

    @property
    def running(self) -> bool:
        return self._scheduler.running

    async def start(self) -> None:
        """Start the scheduler (idempotent)."""
        if self._scheduler.running:
            return
        if not self._listener_added:
            self._scheduler.add_listener(self._on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED)
            self._listener_added = True
        self._scheduler.start()
        logger.info("scheduler_started")

    @staticmethod
    def _on_job_event(event) -> None:
        """Log APScheduler job events for diagnostics."""
        job_id = getattr(event, "job_id", "?")
        if event.code == EVENT_JOB_EXECUTED:
            logger.debug("apscheduler_job_executed", job_id=job_id)
        elif event.code == EVENT_JOB_ERROR:
            logger.error("apscheduler_job_error", job_id=job_id, error=str(getattr(event, "exception", "")))
        elif event.code == EVENT_JOB_MISSED:
            logger.warning("apscheduler_job_missed", job_id=job_id)

    async def stop(self) -> None:
        """Shut down the scheduler, waiting for running jobs to finish."""
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=True)
        # AsyncIOScheduler finishes shutting down on a later loop iteration.
        for _ in range(_SHUTDOWN_POLLS):
            if not self._scheduler.running:
                break
            await asyncio.sleep(0)
        else:
            logger.warning("scheduler_still_running_after_shutdown")
        self._tasks.clear()
        logger.info("scheduler_stopped")

    def schedule_interval(
        self,
        name: str,
        func: AsyncTask,
        seconds: int = 0,
        minutes: int = 0,
        kwargs: Optional[dict[str, Any]] = None,
        run_immediately: bool = False,
    ) -> str:
        """Schedule ``func`` every ``minutes``/``seconds``.

        Args:
            run_immediately: If True, fire once right away then repeat at interval.
        """
        task_id = str(uuid4())

        async def _wrapper():
            try:
                await func(**(kwargs or {}))
                meta = self._tasks.get(task_id)
                if meta:
                    meta.last_run = dt.datetime.now(dt.UTC)
                    meta.run_count += 1
            except Exception as exc:
                logger.error("interval_task_failed", task_id=task_id, name=name, error=str(exc))

        next_run = dt.datetime.now(dt.UTC) if run_immediately else None
        job_kwargs: dict[str, Any] = {}
        if next_run is not None:
            job_kwargs["next_run_time"] = next_run
        self._scheduler.add_job(
            _wrapper,
            trigger=IntervalTrigger(minutes=minutes, seconds=seconds),
            id=task_id,
            name=name,
            **job_kwargs,
        )
        interval_str = f"{minutes}m{seconds}s"
        self._tasks[task_id] = ScheduledTask(
            task_id=task_id, name=name, schedule_info=interval_str,
        )
        logger.info("task_scheduled_interval", task_id=task_id, name=name, interval=interval_str)
        return task_id

    def cancel_task(self, task_id: str) -> bool:
        """Cancel a scheduled task."""
        if task_id not in self._tasks:
            return False
        try:
            self._scheduler.remove_job(task_id)
        except JobLookupError:
            logger.debug("task_already_removed", task_id=task_id)
        self._tasks.pop(task_id, None)
        logger.info("task_cancelled", task_id=task_id)
        return True

    async def run_now(self, task_id: str) -> bool:
        """Run a scheduled task immediately, outside its regular schedule.

        Returns True if the task was found and triggered.
        """
        task = self._tasks.get(task_id)
        job = self._scheduler.get_job(task_id) if task else None
        if job is None:
            return False
        logger.info("task_manual_trigger", task_id=task_id, name=task.name)
        result = job.func()
        if asyncio.iscoroutine(result):
            await result
        return True

    def get_task(self, task_id: str) -> Optional[ScheduledTask]:
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[ScheduledTask]:
        """List all registered tasks."""
        return list(self._tasks.values())
