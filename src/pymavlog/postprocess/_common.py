"""Input lookup and output preparation shared by the pipeline passes."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pymavlog.data import DataKind, DataUnit, Timeseries

if TYPE_CHECKING:
    from pymavlog.system import MavSystem

TUnit = TypeVar("TUnit", bound=DataUnit)


def require_series(system: MavSystem, path: str) -> Timeseries | None:
    """Timeseries at exactly *path*, if it holds samples."""
    unit = system.store.find(path, cls=Timeseries)
    if unit is None or not unit.is_present():
        return None
    return unit


def search_series(system: MavSystem, pattern: str) -> Timeseries | None:
    """First non-empty timeseries whose path matches *pattern*."""
    for unit in system.store.find_all(pattern, Timeseries):
        if unit.is_present():
            return unit
    return None


def derived(
    system: MavSystem,
    path: str,
    cls: type[TUnit],
    units: str = "",
    epoch_datastart: int = 0,
) -> TUnit | None:
    """Get or create an output unit, emptied and marked derived."""
    unit = system.store.ensure(path, cls, units)
    if unit is None:
        return None
    unit.kind = DataKind.DERIVED
    unit.units = units
    unit.clear()
    unit.epoch_datastart = epoch_datastart
    return unit


def clear_outputs(system: MavSystem, *paths: str) -> None:
    """Empty the already existing outputs among *paths*."""
    for path in paths:
        unit = system.store.find(path)
        if unit is not None and unit.kind is DataKind.DERIVED:
            unit.clear()
