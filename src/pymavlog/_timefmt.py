"""Formatting helpers for durations and epoch timestamps."""

from __future__ import annotations

import datetime


def seconds_to_timestr(seconds: float, with_days: bool = True) -> str:
    """Format a duration as ``[Nd ]HH:MM:SS``.

    With ``with_days=False`` the hours field carries the whole duration.
    """
    total = max(int(round(seconds)), 0)
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if with_days:
        days, hours = divmod(hours, 24)
        if days:
            return f"{days}d {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def epoch_to_datetime(epoch_s: float) -> str:
    """Format epoch seconds as a UTC ``YYYY-MM-DD HH:MM:SS`` string."""
    try:
        when = datetime.datetime.fromtimestamp(epoch_s, tz=datetime.UTC)
    except (OverflowError, OSError, ValueError):
        return f"{epoch_s:.0f} s"
    return when.strftime("%Y-%m-%d %H:%M:%S")
