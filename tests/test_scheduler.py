# tests/test_scheduler.py
"""
Test suite for the heartbeat scheduler.

Tests cover:
    - ScheduledJob: due checks, circuit breaker, serialization
    - HeartbeatScheduler: registration, manual tick, error isolation,
      pause/resume and start/stop lifecycle
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from ascend.scheduler import HeartbeatScheduler, ScheduledJob

T0 = datetime(2025, 3, 12, 12, 0, tzinfo=timezone.utc)


def make_job(**kwargs) -> ScheduledJob:
    defaults = {"name": "job", "callback": AsyncMock(), "interval": timedelta(seconds=10)}
    defaults.update(kwargs)
    return ScheduledJob(**defaults)


class TestScheduledJob:
    """Tests for ScheduledJob."""

    def test_defaults(self):
        job = make_job()
        assert job.enabled is True
        assert job.run_count == 0
        assert job.max_consecutive_errors == 5
        assert job.is_circuit_broken is False

    def test_new_job_is_due(self):
        assert make_job().should_run(T0) is True

    def test_disabled_job_not_due(self):
        assert make_job(enabled=False).should_run(T0) is False

    def test_schedule_next(self):
        job = make_job()
        job.schedule_next(T0)
        assert job.last_run == T0
        assert job.next_run == T0 + timedelta(seconds=10)
        assert job.run_count == 1
        assert job.should_run(T0 + timedelta(seconds=9)) is False
        assert job.should_run(T0 + timedelta(seconds=10)) is True

    def test_circuit_breaker(self):
        job = make_job(max_consecutive_errors=2)
        job.record_error("one")
        assert job.should_run(T0) is True
        job.record_error("two")
        assert job.is_circuit_broken is True
        assert job.should_run(T0) is False
        job.reset_circuit_breaker()
        assert job.should_run(T0) is True

    def test_success_clears_consecutive_errors(self):
        job = make_job()
        job.record_error("boom")
        job.record_success()
        assert job.consecutive_errors == 0
        assert job.error_count == 1
        assert job.last_error is None

    def test_to_dict(self):
        job = make_job(description="sweep")
        job.schedule_next(T0)
        data = job.to_dict()
        assert data["name"] == "job"
        assert data["interval_seconds"] == 10.0
        assert data["last_run"] == T0.isoformat()
        assert data["description"] == "sweep"


class TestHeartbeatScheduler:
    """Tests for HeartbeatScheduler."""

    def test_register_and_list(self):
        scheduler = HeartbeatScheduler()
        scheduler.register(make_job(name="a"))
        scheduler.register(make_job(name="b"))
        assert scheduler.list_jobs() == ["a", "b"]
        scheduler.unregister("a")
        assert scheduler.list_jobs() == ["b"]
        assert scheduler.get_job("a") is None

    @pytest.mark.asyncio
    async def test_tick_runs_due_jobs(self):
        scheduler = HeartbeatScheduler()
        job = make_job()
        scheduler.register(job)

        assert await scheduler.tick(T0) == ["job"]
        assert await scheduler.tick(T0 + timedelta(seconds=5)) == []
        assert await scheduler.tick(T0 + timedelta(seconds=10)) == ["job"]
        assert job.callback.await_count == 2

    @pytest.mark.asyncio
    async def test_failing_job_is_isolated(self):
        scheduler = HeartbeatScheduler()
        bad = make_job(name="bad", callback=AsyncMock(side_effect=RuntimeError("boom")))
        good = make_job(name="good")
        scheduler.register(bad)
        scheduler.register(good)
        on_error = AsyncMock()
        scheduler.on_error(on_error)

        await scheduler.tick(T0)

        good.callback.assert_awaited_once()
        assert bad.error_count == 1
        assert bad.last_error == "boom"
        on_error.assert_awaited_once()
        assert on_error.await_args.args[0] == "bad"

    @pytest.mark.asyncio
    async def test_enable_disable(self):
        scheduler = HeartbeatScheduler()
        job = make_job()
        scheduler.register(job)
        scheduler.disable_job("job")
        assert await scheduler.tick(T0) == []
        scheduler.enable_job("job")
        assert await scheduler.tick(T0) == ["job"]

    @pytest.mark.asyncio
    async def test_run_job_now(self):
        scheduler = HeartbeatScheduler()
        job = make_job()
        scheduler.register(job)
        await scheduler.run_job_now("job")
        job.callback.assert_awaited_once()
        with pytest.raises(ValueError):
            await scheduler.run_job_now("missing")

    @pytest.mark.asyncio
    async def test_start_stop_loop(self):
        scheduler = HeartbeatScheduler(tick_interval=timedelta(milliseconds=10))
        job = make_job(interval=timedelta(milliseconds=10))
        scheduler.register(job)

        await scheduler.start()
        assert scheduler.is_running is True
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert scheduler.is_running is False
        assert job.callback.await_count >= 1

    @pytest.mark.asyncio
    async def test_paused_loop_skips_jobs(self):
        scheduler = HeartbeatScheduler(tick_interval=timedelta(milliseconds=10))
        job = make_job(interval=timedelta(milliseconds=10))
        scheduler.register(job)
        scheduler.pause()

        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert scheduler.is_paused is True
        job.callback.assert_not_awaited()

    def test_status(self):
        scheduler = HeartbeatScheduler(tick_interval=timedelta(seconds=2))
        scheduler.register(make_job())
        status = scheduler.get_status()
        assert status["running"] is False
        assert status["tick_interval_seconds"] == 2.0
        assert status["job_count"] == 1
        assert "job" in status["jobs"]
