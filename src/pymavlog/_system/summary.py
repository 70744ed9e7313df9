"""Human-readable summary of a :class:`pymavlog.system.MavSystem`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymavlog._constants import (
    PATH_AIRSPEED,
    PATH_ALT_GND,
    PATH_ALT_MSL,
    PATH_AUTOPILOT_LOAD,
    PATH_BATTERY_CURRENT,
    PATH_BATTERY_VOLTAGE,
    PATH_CLIMB,
    PATH_FLIGHTBOOK_FIRST_TAKEOFF,
    PATH_FLIGHTBOOK_FLIGHTTIME,
    PATH_FLIGHTBOOK_LAST_LANDING,
    PATH_FLIGHTBOOK_NFLIGHTS,
    PATH_LAT,
    PATH_LON,
    PATH_THROTTLE,
    USEC_PER_SEC,
)
from pymavlog._timefmt import epoch_to_datetime, seconds_to_timestr
from pymavlog.data import Parameter, Timeseries

if TYPE_CHECKING:
    from pymavlog.system import MavSystem

_ITEM = "   - "


def _fmt(value: object) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _ids(msgids: tuple[int, ...]) -> str:
    return ", ".join(str(msgid) for msgid in msgids)


def _series(system: MavSystem, path: str) -> Timeseries | None:
    unit = system.store.find(path, cls=Timeseries)
    if unit is None or not unit.is_present():
        return None
    return unit


def _param(system: MavSystem, path: str) -> Parameter[float] | None:
    unit = system.store.find(path, cls=Parameter)
    if unit is None or unit.get_value() is None:
        return None
    return unit


def _span(lines: list[str], system: MavSystem, label: str, path: str, *, descending: bool = False) -> None:
    series = _series(system, path)
    if series is None:
        return
    low, high = series.get_min(), series.get_max()
    first, last = (high, low) if descending else (low, high)
    lines.append(f"{_ITEM}{label}: {_fmt(first)} ... {_fmt(last)} {series.units}".rstrip())


def _last(lines: list[str], system: MavSystem, label: str, path: str) -> None:
    series = _series(system, path)
    if series is None:
        return
    last = series.get_last()
    if last is None:
        return
    lines.append(f"{_ITEM}{label}: {_fmt(last[1])} {series.units}".rstrip())


def build_summary(system: MavSystem) -> str:
    """Multi-section text summary of *system*.

    A system loaded with ``deferred_load`` only has the general section.
    """
    begin = system.time_active_begin()
    end = system.time_active_end()
    lines = [
        "General:",
        f"{_ITEM}id: {system.system_id}",
        f"{_ITEM}type: {system.vehicle_type_str}",
        f"{_ITEM}autopilot: {system.autopilot_type_str}",
        f"{_ITEM}has_been_armed: {int(system.has_been_armed)}",
        f"{_ITEM}active for {seconds_to_timestr(end - begin)} between "
        f"{epoch_to_datetime(begin)} and {epoch_to_datetime(end)}",
    ]
    if system.deferred_load:
        return "\n".join(lines) + "\n"

    lines.append("Power:")
    _span(lines, system, "battery voltage", PATH_BATTERY_VOLTAGE, descending=True)
    _span(lines, system, "battery current", PATH_BATTERY_CURRENT)

    lines.append("Flight Book:")
    moments = (
        ("first takeoff", PATH_FLIGHTBOOK_FIRST_TAKEOFF),
        ("last landing", PATH_FLIGHTBOOK_LAST_LANDING),
    )
    for label, path in moments:
        moment = _param(system, path)
        if moment is not None:
            epoch_s = float(moment.get_value()) + moment.epoch_datastart / USEC_PER_SEC
            lines.append(f"{_ITEM}{label}: {epoch_to_datetime(epoch_s)}")
    nflights = _param(system, PATH_FLIGHTBOOK_NFLIGHTS)
    if nflights is not None:
        lines.append(f"{_ITEM}number of flights: {nflights.get_value()}")
    flighttime = _param(system, PATH_FLIGHTBOOK_FLIGHTTIME)
    if flighttime is not None:
        seconds = float(flighttime.get_value())
        lines.append(f"{_ITEM}total flight time: {seconds_to_timestr(seconds, with_days=False)}")

    lines.append("Flight performance:")
    _span(lines, system, "airspeed", PATH_AIRSPEED)
    _span(lines, system, "alt. MSL", PATH_ALT_MSL)
    _span(lines, system, "climb rate", PATH_CLIMB)
    _span(lines, system, "throttle", PATH_THROTTLE)

    lines.append("Last Position:")
    _last(lines, system, "lat", PATH_LAT)
    _last(lines, system, "lon", PATH_LON)
    _last(lines, system, "rel. alt", PATH_ALT_GND)

    lines.append("Computer:")
    load = _series(system, PATH_AUTOPILOT_LOAD)
    if load is not None:
        lines.append(f"{_ITEM}max. autopilot load: {_fmt(load.get_max())} {load.units}".rstrip())

    stats = system.link_stats()
    lines.append("Link:")
    lines.append(f"{_ITEM}received total: {stats.num_received} (IDs: {_ids(stats.msgids_interpreted)})")
    if stats.num_uninterpreted > 0:
        lines.append(f"{_ITEM}uninterpreted: {stats.num_uninterpreted} (IDs: {_ids(stats.msgids_uninterpreted)})")
    lines.append(f"{_ITEM}errors: {stats.num_error}")
    return "\n".join(lines) + "\n"
