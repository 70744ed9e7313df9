"""Flight book: takeoffs, landings and flight time."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymavlog._constants import (
    PATH_ALT_GND,
    PATH_FLIGHTBOOK_EVENTS,
    PATH_FLIGHTBOOK_FIRST_TAKEOFF,
    PATH_FLIGHTBOOK_FLIGHTTIME,
    PATH_FLIGHTBOOK_LAST_LANDING,
    PATH_FLIGHTBOOK_NFLIGHTS,
    PATH_THROTTLE,
)
from pymavlog.data import Event, Parameter
from pymavlog.postprocess._common import clear_outputs, derived, require_series

if TYPE_CHECKING:
    from pymavlog.system import MavSystem


def postprocess_flightbook(system: MavSystem) -> None:
    """Derive takeoff/landing events from altitude and throttle.

    The vehicle counts as flying while altitude above ground and throttle
    both exceed the configured thresholds. Throttle is interpolated at every
    altitude sample. First takeoff and last landing are relative times; add
    the unit's epoch baseline for absolute time.
    """
    log = system.logger
    clear_outputs(
        system,
        PATH_FLIGHTBOOK_EVENTS,
        PATH_FLIGHTBOOK_NFLIGHTS,
        PATH_FLIGHTBOOK_FLIGHTTIME,
        PATH_FLIGHTBOOK_FIRST_TAKEOFF,
        PATH_FLIGHTBOOK_LAST_LANDING,
    )
    altitude = require_series(system, PATH_ALT_GND)
    throttle = require_series(system, PATH_THROTTLE)
    if altitude is None or throttle is None:
        log.debug("#%d: postproc/flightbook: altitude or throttle not available", system.system_id)
        return
    if altitude.epoch_datastart != throttle.epoch_datastart:
        log.warning("#%d: postproc/flightbook: cannot work on unsync'd data", system.system_id)
        return
    epoch = altitude.epoch_datastart

    events = derived(system, PATH_FLIGHTBOOK_EVENTS, Event, "", epoch)
    nflights_out = derived(system, PATH_FLIGHTBOOK_NFLIGHTS, Parameter, "", epoch)
    flighttime_out = derived(system, PATH_FLIGHTBOOK_FLIGHTTIME, Parameter, "s", epoch)
    first_takeoff_out = derived(system, PATH_FLIGHTBOOK_FIRST_TAKEOFF, Parameter, "[time epoch]", epoch)
    last_landing_out = derived(system, PATH_FLIGHTBOOK_LAST_LANDING, Parameter, "[time epoch]", epoch)
    if (
        events is None
        or nflights_out is None
        or flighttime_out is None
        or first_takeoff_out is None
        or last_landing_out is None
    ):
        return

    min_alt = system.config.takeoff_altitude_m
    min_throttle = system.config.takeoff_throttle_pct
    flying = False
    t_takeoff = 0.0
    first_takeoff = 0.0
    last_landing = 0.0
    nflights = 0
    flighttime = 0.0
    for t, alt in altitude:
        thr = throttle.get_data_at_time(t)
        if thr is None:
            continue
        seems_flying = alt > min_alt and thr > min_throttle
        if seems_flying and not flying:
            flying = True
            events.add_elem("takeoff", t)
            nflights += 1
            if nflights == 1:
                first_takeoff = t
            t_takeoff = t
        elif not seems_flying and flying:
            flying = False
            events.add_elem("landing", t)
            last_landing = t
            flighttime += t - t_takeoff

    nflights_out.add_elem(nflights)
    flighttime_out.add_elem(flighttime)
    first_takeoff_out.add_elem(first_takeoff)
    last_landing_out.add_elem(last_landing)
    log.info("#%d: postproc/flightbook: done", system.system_id)
