"""Read-only export view of a data unit."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from pymavlog.models._base import MavBaseModel


class UnitExport(MavBaseModel):
    """Detached copy of one data unit, for presentation or export layers.

    Parameters
    ----------
    path : str
        Full slash-delimited path of the unit.
    name : str
        Basename of the unit.
    variant : str
        ``"timeseries"``, ``"event"`` or ``"parameter"``.
    units : str
        Units-of-measure text.
    kind : str
        ``"raw"`` or ``"derived"``.
    epoch_datastart : int
        Epoch baseline in microseconds.
    samples : tuple of (float, Any)
        ``(relative seconds, value)`` pairs of timed units.
    values : tuple
        Values of a parameter unit.
    """

    path: str
    name: str
    variant: str
    units: str = ""
    kind: str = "raw"
    epoch_datastart: int = 0
    samples: tuple[tuple[float, Any], ...] = Field(default_factory=tuple)
    values: tuple[Any, ...] = Field(default_factory=tuple)
