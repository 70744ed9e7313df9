"""Dense numeric time series."""

from __future__ import annotations

import bisect

import numpy as np

from pymavlog.data._timed import TimedUnit


class Timeseries(TimedUnit[float]):
    """Ordered ``(time, value)`` samples of a numeric quantity.

    Values between samples are obtained by linear interpolation; outside the
    sampled range the nearest sample is returned.
    """

    variant = "timeseries"

    def get_data_at_time(self, t: float) -> float | None:
        """Value at relative time *t*, or ``None`` if the series is empty."""
        times = self._times
        if not times:
            return None
        if t <= times[0]:
            return self._values[0]
        if t >= times[-1]:
            return self._values[-1]
        idx = bisect.bisect_right(times, t)
        t0, t1 = times[idx - 1], times[idx]
        v0, v1 = self._values[idx - 1], self._values[idx]
        if t0 == t:
            return v0
        return v0 + (v1 - v0) * (t - t0) / (t1 - t0)

    def get_min(self) -> float | None:
        return min(self._values) if self._values else None

    def get_max(self) -> float | None:
        return max(self._values) if self._values else None

    def get_range(self) -> float:
        """``max - min``, zero for an empty series."""
        if not self._values:
            return 0.0
        return max(self._values) - min(self._values)

    def moving_average(self, out: Timeseries, window_s: float) -> None:
        """Fill *out* with the centred moving average of this series.

        Every output sample, taken at an input sample's time ``t``, is the
        mean of all input samples within ``window_s / 2`` of ``t``. *out* is
        cleared first and inherits this series' epoch baseline.
        """
        out.clear()
        out.epoch_datastart = self.epoch_datastart
        if not self._times:
            return
        t = np.asarray(self._times, dtype=float)
        v = np.asarray(self._values, dtype=float)
        half = window_s / 2.0
        lo = np.searchsorted(t, t - half, side="left")
        hi = np.searchsorted(t, t + half, side="right")
        csum = np.concatenate(([0.0], np.cumsum(v)))
        means = (csum[hi] - csum[lo]) / (hi - lo)
        for ti, mi in zip(t.tolist(), means.tolist(), strict=True):
            out.add_elem(mi, ti)
