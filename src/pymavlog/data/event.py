"""Sparse, change-triggered event log."""

from __future__ import annotations

import bisect
from typing import TypeVar

from pymavlog.data._timed import TimedUnit

T = TypeVar("T")


class Event(TimedUnit[T]):
    """Append-only log of values, usually written only when they change."""

    variant = "event"

    def get_latest(self) -> T | None:
        return self._values[-1] if self._values else None

    def add_if_changed(self, value: T, t: float) -> bool:
        """Append *value* unless it equals the latest logged value."""
        if self._values and self._values[-1] == value:
            return False
        self.add_elem(value, t)
        return True

    def get_data_at_time(self, t: float) -> T | None:
        """Value in effect at *t*: the latest event at or before it.

        ``None`` before the first event.
        """
        idx = bisect.bisect_right(self._times, t)
        if idx == 0:
            return None
        return self._values[idx - 1]
