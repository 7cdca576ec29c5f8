"""Background scheduler for the retention sweep."""

import asyncio
import contextlib
from collections.abc import Callable

from archivist.core.logging import get_logger, log_exception
from archivist.lifecycle.engine import SweepReport, TransitionEngine

logger = get_logger(__name__)


class RetentionScheduler:
    """Runs TransitionEngine.sweep() on a fixed interval.

    Usage:
        scheduler = RetentionScheduler(engine, interval_seconds=3600)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        engine: TransitionEngine,
        interval_seconds: float | None = None,
        on_report: Callable[[SweepReport], None] | None = None,
    ):
        """Initialize the scheduler.

        Args:
            engine: Engine whose sweep is run
            interval_seconds: Delay between runs (defaults to the engine settings)
            on_report: Optional callback receiving each SweepReport
        """
        self.engine = engine
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else engine.settings.sweep_interval_seconds
        )
        self.on_report = on_report
        self.last_report: SweepReport | None = None
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start background sweeping."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._background_loop())
        logger.info("retention_scheduler_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop background sweeping."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("retention_scheduler_stopped")

    async def run_once(self) -> SweepReport:
        """Run a single sweep immediately."""
        report = await self.engine.sweep()
        self.last_report = report
        if self.on_report:
            self.on_report(report)
        return report

    async def _background_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                log_exception(logger, e, operation="retention_sweep")


# Module-level scheduler instance
_scheduler: RetentionScheduler | None = None


def get_retention_scheduler() -> RetentionScheduler:
    """Get the global retention scheduler.

    Raises:
        RuntimeError: If initialize_retention_scheduler() was never called
    """
    if _scheduler is None:
        raise RuntimeError("Retention scheduler not initialized")
    return _scheduler


def initialize_retention_scheduler(
    engine: TransitionEngine,
    interval_seconds: float | None = None,
) -> RetentionScheduler:
    """Create and register the global retention scheduler."""
    global _scheduler
    _scheduler = RetentionScheduler(engine, interval_seconds=interval_seconds)
    return _scheduler
