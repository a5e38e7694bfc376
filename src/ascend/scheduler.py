# src/ascend/scheduler.py
"""
Heartbeat Scheduler for Periodic Tracker Jobs.

A lightweight, async-native scheduler running registered jobs at fixed
intervals on the current event loop. The tracker uses it for the reminder
sweep (every 10 seconds) and for progress history sampling.

Features:
    - Fixed interval scheduling
    - Error isolation with per-job circuit breakers
    - Pause/resume capability
    - Manual ``tick()`` for tests and embedding

Example:
    scheduler = HeartbeatScheduler(tick_interval=timedelta(seconds=1))
    scheduler.register(ScheduledJob(
        name="reminders",
        callback=scanner.scan,
        interval=timedelta(seconds=10),
        description="Fire due reminders",
    ))

    await scheduler.start()
    ...
    await scheduler.stop()
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ScheduledJob
# =============================================================================


@dataclass
class ScheduledJob:
    """
    A job to run periodically.

    Attributes:
        name: Unique job identifier
        callback: Async function to call
        interval: Time between runs
        enabled: Whether the job is active
        last_run: When the job last ran
        next_run: When the job should run next
        run_count: Total runs
        error_count: Total errors
        consecutive_errors: Errors since last success
        max_consecutive_errors: Circuit breaker threshold
        last_error: Most recent error message
        description: Human-readable description
    """

    name: str
    callback: Callable[[], Awaitable[Any]]
    interval: timedelta

    enabled: bool = True
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    run_count: int = 0

    error_count: int = 0
    consecutive_errors: int = 0
    max_consecutive_errors: int = 5
    last_error: Optional[str] = None

    description: str = ""

    def should_run(self, now: datetime) -> bool:
        """
        Check if the job is due.

        A job runs when it is enabled, its circuit breaker is closed, and it
        has never run or its next_run time has passed.
        """
        if not self.enabled or self.is_circuit_broken:
            return False
        if self.next_run is None:
            return True
        return now >= self.next_run

    def schedule_next(self, now: datetime) -> None:
        self.last_run = now
        self.next_run = now + self.interval
        self.run_count += 1

    def record_success(self) -> None:
        self.consecutive_errors = 0
        self.last_error = None

    def record_error(self, error: str) -> None:
        self.error_count += 1
        self.consecutive_errors += 1
        self.last_error = error

    def reset_circuit_breaker(self) -> None:
        self.consecutive_errors = 0
        self.last_error = None
        logger.info("Circuit breaker reset for job: %s", self.name)

    @property
    def is_circuit_broken(self) -> bool:
        return self.consecutive_errors >= self.max_consecutive_errors

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "interval_seconds": self.interval.total_seconds(),
            "enabled": self.enabled,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "run_count": self.run_count,
            "error_count": self.error_count,
            "consecutive_errors": self.consecutive_errors,
            "last_error": self.last_error,
            "is_circuit_broken": self.is_circuit_broken,
            "description": self.description,
        }


# =============================================================================
# HeartbeatScheduler
# =============================================================================


class HeartbeatScheduler:
    """
    Runs registered jobs when they fall due.

    The loop wakes every ``tick_interval`` and runs each due job in
    registration order. The tick interval must not exceed the shortest job
    interval, otherwise jobs run late by up to one tick.

    Args:
        tick_interval: How often to check for due jobs.
    """

    def __init__(self, tick_interval: timedelta = timedelta(seconds=1)) -> None:
        self.tick_interval = tick_interval

        self._jobs: Dict[str, ScheduledJob] = {}
        self._running = False
        self._paused = False
        self._loop_task: Optional[asyncio.Task] = None
        self._on_error: List[Callable[[str, Exception], Awaitable[None]]] = []

    def register(self, job: ScheduledJob) -> None:
        if job.interval < self.tick_interval:
            logger.warning(
                "Job %s interval %.1fs is shorter than the scheduler tick %.1fs",
                job.name,
                job.interval.total_seconds(),
                self.tick_interval.total_seconds(),
            )
        self._jobs[job.name] = job
        logger.info("Registered scheduled job: %s (every %ss)", job.name, job.interval.total_seconds())

    def unregister(self, name: str) -> None:
        if self._jobs.pop(name, None) is not None:
            logger.info("Unregistered scheduled job: %s", name)

    def get_job(self, name: str) -> Optional[ScheduledJob]:
        return self._jobs.get(name)

    def list_jobs(self) -> List[str]:
        return list(self._jobs.keys())

    def enable_job(self, name: str) -> None:
        """Enable a job and reset its circuit breaker."""
        job = self._jobs.get(name)
        if job:
            job.enabled = True
            job.reset_circuit_breaker()

    def disable_job(self, name: str) -> None:
        job = self._jobs.get(name)
        if job:
            job.enabled = False

    def on_error(self, callback: Callable[[str, Exception], Awaitable[None]]) -> None:
        """
        Register callback for job errors.

        Args:
            callback: Async function(job_name, exception)
        """
        self._on_error.append(callback)

    async def start(self) -> None:
        """Start the loop. Idempotent."""
        if self._running:
            return
        self._running = True
        self._loop_task = asyncio.create_task(self._loop())
        logger.info("Scheduler started (tick: %ss)", self.tick_interval.total_seconds())

    async def stop(self) -> None:
        """Stop the loop and wait for it to exit."""
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        logger.info("Scheduler stopped")

    def pause(self) -> None:
        self._paused = True
        logger.info("Scheduler paused")

    def resume(self) -> None:
        self._paused = False
        logger.info("Scheduler resumed")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    async def tick(self, now: Optional[datetime] = None) -> List[str]:
        """
        Run every due job once.

        Returns:
            Names of the jobs that ran.
        """
        now = now or _utcnow()
        ran = []
        for job in list(self._jobs.values()):
            if job.should_run(now):
                await self._run_job(job, now)
                ran.append(job.name)
        return ran

    async def _loop(self) -> None:
        while self._running:
            try:
                if not self._paused:
                    await self.tick()
                await asyncio.sleep(self.tick_interval.total_seconds())
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Scheduler loop error: %s", e)
                await asyncio.sleep(self.tick_interval.total_seconds())

    async def _run_job(self, job: ScheduledJob, now: datetime) -> None:
        try:
            logger.debug("Running scheduled job: %s", job.name)
            await job.callback()
            job.schedule_next(now)
            job.record_success()
        except Exception as e:
            job.record_error(str(e))
            job.schedule_next(now)
            logger.error("Job %s failed: %s", job.name, e)

            for callback in self._on_error:
                try:
                    await callback(job.name, e)
                except Exception as callback_error:
                    logger.warning("Error callback for job %s failed: %s", job.name, callback_error)

            if job.is_circuit_broken:
                logger.warning(
                    "Circuit breaker opened for job: %s after %d consecutive errors",
                    job.name,
                    job.consecutive_errors,
                )

    async def run_job_now(self, name: str) -> None:
        """
        Run a specific job immediately, bypassing its schedule.

        Raises:
            ValueError: If the job is not registered
        """
        if name not in self._jobs:
            raise ValueError(f"Job not found: {name}")
        await self._run_job(self._jobs[name], _utcnow())

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self._running,
            "paused": self._paused,
            "tick_interval_seconds": self.tick_interval.total_seconds(),
            "job_count": len(self._jobs),
            "jobs": {name: job.to_dict() for name, job in self._jobs.items()},
        }
