"""Time sources for the lifecycle engine."""

from datetime import UTC, datetime, timedelta


class Clock:
    """Protocol for time sources."""

    def now(self) -> datetime:
        """Current time, timezone-aware."""
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock(Clock):
    """Manually controlled clock for tests and replays."""

    def __init__(self, current: datetime | None = None):
        self.current = current or datetime.now(UTC)

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new time."""
        self.current = self.current + delta
        return self.current
