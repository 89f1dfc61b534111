"""
Clock adapter for the Automation engine.

The adapter is the engine's only view of wall-clock time. The controller
uses SystemClock; tests use MockClock to place evaluations at exact
minutes and weekdays.

Design Principle:
    Triggers match on local wall-clock hour, minute and weekday, so the
    clock returns naive local datetimes. Timezone handling belongs to
    whoever constructs the clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class Clock(ABC):
    """
    Abstract time source.

    This interface is intentionally minimal:
    - now: Current wall-clock time
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Get current time.

        Returns:
            Current local datetime
        """
        pass


class SystemClock(Clock):
    """Clock backed by the host's local time."""

    def now(self) -> datetime:
        return datetime.now()


class MockClock(Clock):
    """
    Mock clock for testing.

    Returns a fixed time until moved with set_current_time() or advance().
    """

    def __init__(self, current: Optional[datetime] = None) -> None:
        self._current_time = current or datetime(2025, 1, 13, 0, 0, 0)

    def set_current_time(self, dt: datetime) -> None:
        """Set current time for testing."""
        self._current_time = dt

    def advance(self, **kwargs: float) -> datetime:
        """Move the clock forward by a timedelta (e.g., minutes=1)."""
        self._current_time = self._current_time + timedelta(**kwargs)
        return self._current_time

    def now(self) -> datetime:
        return self._current_time
