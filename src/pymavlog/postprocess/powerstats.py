"""Power, charge and energy consumption from battery voltage and current."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymavlog._constants import (
    PATH_BATTERY_CURRENT,
    PATH_BATTERY_VOLTAGE,
    PATH_CUM_CHARGE,
    PATH_CUM_CONSUMPTION,
    PATH_INST_CHARGE,
    PATH_INST_CONSUMPTION,
    PATH_POWER,
)
from pymavlog.data import Timeseries
from pymavlog.postprocess._common import clear_outputs, derived, require_series

if TYPE_CHECKING:
    from pymavlog.system import MavSystem

SECONDS_PER_HOUR = 3600.0


def _integrate(source: Timeseries, inst: Timeseries, cum: Timeseries) -> None:
    """Trapezoidal integration of *source* over time.

    *inst* receives the area of each segment, *cum* the running total in
    hours (input unit times seconds divided by 3600). Both start at zero on
    the first sample.
    """
    total = 0.0
    previous: tuple[float, float] | None = None
    for t, value in source:
        if previous is None:
            inst.add_elem(0.0, t)
            cum.add_elem(0.0, t)
        else:
            t_prev, value_prev = previous
            area = (t - t_prev) * (value_prev + value) / 2.0
            total += area
            inst.add_elem(area, t)
            cum.add_elem(total / SECONDS_PER_HOUR, t)
        previous = (t, value)


def postprocess_powerstats(system: MavSystem) -> None:
    """Compute power, charge and consumption series.

    Power is evaluated at every voltage sample with the current
    interpolated there. Charge integrates current (As, then Ah), consumption
    integrates power (Ws, then Wh).
    """
    log = system.logger
    clear_outputs(system, PATH_POWER, PATH_INST_CONSUMPTION, PATH_INST_CHARGE, PATH_CUM_CONSUMPTION, PATH_CUM_CHARGE)
    voltage = require_series(system, PATH_BATTERY_VOLTAGE)
    current = require_series(system, PATH_BATTERY_CURRENT)
    if voltage is None or current is None:
        log.debug("#%d: postproc/powerstats: battery voltage or current not available", system.system_id)
        return
    if voltage.epoch_datastart != current.epoch_datastart:
        log.warning("#%d: postproc/powerstats: cannot work on unsync'd data", system.system_id)
        return
    epoch = current.epoch_datastart

    power = derived(system, PATH_POWER, Timeseries, "W", epoch)
    consumption = derived(system, PATH_INST_CONSUMPTION, Timeseries, "Ws", epoch)
    charge = derived(system, PATH_INST_CHARGE, Timeseries, "As", epoch)
    cum_consumption = derived(system, PATH_CUM_CONSUMPTION, Timeseries, "Wh", epoch)
    cum_charge = derived(system, PATH_CUM_CHARGE, Timeseries, "Ah", epoch)
    if power is None or consumption is None or charge is None or cum_consumption is None or cum_charge is None:
        return

    for t, volts in voltage:
        amps = current.get_data_at_time(t)
        if amps is not None:
            power.add_elem(volts * amps, t)

    _integrate(current, charge, cum_charge)
    _integrate(power, consumption, cum_consumption)
    log.info("#%d: postproc/powerstats: done", system.system_id)
