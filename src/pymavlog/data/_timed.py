"""Shared behaviour of time-indexed data units."""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from typing import Any, Generic, Self, TypeVar

import numpy as np

from pymavlog._constants import USEC_PER_SEC
from pymavlog.data._base import DataKind, DataUnit

T = TypeVar("T")


class TimedUnit(DataUnit, Generic[T]):
    """A unit holding ``(relative seconds, value)`` samples ordered by time.

    Parameters
    ----------
    periodic : bool
        Whether the source emits this quantity at a fixed rate. Only
        periodic units are candidates for timestamp repair.
    """

    is_timed = True

    def __init__(
        self,
        name: str,
        units: str = "",
        *,
        kind: DataKind = DataKind.RAW,
        epoch_datastart: int = 0,
        periodic: bool = False,
    ) -> None:
        super().__init__(name, units, kind=kind, epoch_datastart=epoch_datastart)
        self.periodic = periodic
        self._times: list[float] = []
        self._values: list[T] = []

    def __len__(self) -> int:
        return len(self._times)

    def __iter__(self) -> Iterator[tuple[float, T]]:
        return zip(self._times, self._values, strict=True)

    def clear(self) -> None:
        self._times = []
        self._values = []

    def _copy_payload(self) -> None:
        self._times = list(self._times)
        self._values = list(self._values)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def add_elem(self, value: T, t: float) -> None:
        """Add one sample.

        Raw ingestion passes non-decreasing times and the sample is appended.
        An earlier time is inserted after any samples sharing that time, so
        the sequence stays ordered.
        """
        t = float(t)
        if not self._times or t >= self._times[-1]:
            self._times.append(t)
            self._values.append(value)
            return
        idx = bisect.bisect_right(self._times, t)
        self._times.insert(idx, t)
        self._values.insert(idx, value)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_data(self, k: int) -> tuple[float, T] | None:
        if k < 0 or k >= len(self._times):
            return None
        return self._times[k], self._values[k]

    def get_last(self) -> tuple[float, T] | None:
        if not self._times:
            return None
        return self._times[-1], self._values[-1]

    def times(self) -> tuple[float, ...]:
        return tuple(self._times)

    def values(self) -> tuple[T, ...]:
        return tuple(self._values)

    @property
    def first_time(self) -> float | None:
        return self._times[0] if self._times else None

    @property
    def last_time(self) -> float | None:
        return self._times[-1] if self._times else None

    @property
    def epoch_datafirst(self) -> int:
        """Absolute time of the first sample in microseconds."""
        if not self._times:
            return self.epoch_datastart
        return self.epoch_datastart + round(self._times[0] * USEC_PER_SEC)

    @property
    def epoch_dataend(self) -> int:
        if not self._times:
            return self.epoch_datastart
        return self.epoch_datastart + round(self._times[-1] * USEC_PER_SEC)

    # ------------------------------------------------------------------
    # Timestamp repair
    # ------------------------------------------------------------------

    def has_bad_timestamps(self, *, min_samples: int = 10, jitter_ratio: float = 0.5) -> bool:
        """Whether a periodic unit's timestamps do not look evenly spaced.

        Non-periodic units and units with fewer than *min_samples* samples
        are never flagged. A periodic unit is flagged when two samples share
        a timestamp, or when the standard deviation of its sample intervals
        exceeds *jitter_ratio* times their mean.
        """
        if not self.periodic or len(self._times) < min_samples:
            return False
        intervals = np.diff(np.asarray(self._times, dtype=float))
        if np.any(intervals <= 0.0):
            return True
        mean = float(intervals.mean())
        return float(intervals.std()) > jitter_ratio * mean

    def make_periodic(self) -> None:
        """Rewrite timestamps evenly over the original first..last span.

        Sample order and count are preserved; the original timestamps are
        lost.
        """
        n = len(self._times)
        if n < 2:
            return
        spaced = np.linspace(self._times[0], self._times[-1], n)
        self._times = [float(t) for t in spaced]

    # ------------------------------------------------------------------
    # Merge / export
    # ------------------------------------------------------------------

    def _merge_payload(self, other: Self) -> None:
        incoming_times = set(other._times)
        kept = [(t, v) for t, v in zip(self._times, self._values, strict=True) if t not in incoming_times]
        merged: list[tuple[float, Any]] = []
        i = j = 0
        while i < len(kept) and j < len(other._times):
            if kept[i][0] <= other._times[j]:
                merged.append(kept[i])
                i += 1
            else:
                merged.append((other._times[j], other._values[j]))
                j += 1
        merged.extend(kept[i:])
        merged.extend(zip(other._times[j:], other._values[j:], strict=True))
        self._times = [t for t, _ in merged]
        self._values = [v for _, v in merged]
        self.periodic = self.periodic or other.periodic

    def _export_fields(self) -> dict[str, Any]:
        return {"samples": tuple(zip(self._times, self._values, strict=True))}
