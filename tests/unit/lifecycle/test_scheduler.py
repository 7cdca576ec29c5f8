"""Unit tests for the retention scheduler."""

import asyncio
from unittest.mock import patch

import pytest

from archivist.lifecycle import scheduler as scheduler_module
from archivist.lifecycle.scheduler import (
    RetentionScheduler,
    get_retention_scheduler,
    initialize_retention_scheduler,
)


class TestRetentionScheduler:
    """Tests for RetentionScheduler."""

    def test_interval_defaults_to_settings(self, engine):
        scheduler = RetentionScheduler(engine)
        assert scheduler.interval_seconds == 3600

    @pytest.mark.asyncio
    async def test_run_once(self, engine):
        reports = []
        scheduler = RetentionScheduler(engine, interval_seconds=60, on_report=reports.append)
        report = await scheduler.run_once()
        assert scheduler.last_report is report
        assert reports == [report]

    @pytest.mark.asyncio
    async def test_start_and_stop(self, engine):
        """Test the background loop sweeps until stopped."""
        reports = []
        scheduler = RetentionScheduler(engine, interval_seconds=0.01, on_report=reports.append)
        await scheduler.start()
        assert scheduler.is_running
        await asyncio.sleep(0.1)
        await scheduler.stop()
        assert not scheduler.is_running
        assert len(reports) >= 1

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, engine):
        scheduler = RetentionScheduler(engine, interval_seconds=60)
        await scheduler.start()
        task = scheduler._task
        await scheduler.start()
        assert scheduler._task is task
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_loop_survives_failed_run(self, engine, monkeypatch):
        calls = []

        async def broken_sweep(now=None):
            calls.append(now)
            raise RuntimeError("store offline")

        monkeypatch.setattr(engine, "sweep", broken_sweep)
        scheduler = RetentionScheduler(engine, interval_seconds=0.01)
        with patch("archivist.lifecycle.scheduler.log_exception") as mock_log:
            await scheduler.start()
            await asyncio.sleep(0.1)
            await scheduler.stop()
        assert len(calls) >= 2
        assert mock_log.call_count >= 2
        _, error = mock_log.call_args.args
        assert isinstance(error, RuntimeError)
        assert mock_log.call_args.kwargs == {"operation": "retention_sweep"}


class TestModuleScheduler:
    """Tests for the module-level scheduler accessors."""

    def test_not_initialized(self, monkeypatch):
        monkeypatch.setattr(scheduler_module, "_scheduler", None)
        with pytest.raises(RuntimeError):
            get_retention_scheduler()

    def test_initialize(self, engine, monkeypatch):
        monkeypatch.setattr(scheduler_module, "_scheduler", None)
        scheduler = initialize_retention_scheduler(engine, interval_seconds=30)
        assert get_retention_scheduler() is scheduler
        assert scheduler.interval_seconds == 30
