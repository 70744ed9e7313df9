"""Glide performance estimation.

Inputs are located by path pattern rather than by fixed path, so that
series named differently by different log sources are picked up. Both
passes degrade gracefully: missing inputs narrow what is computed and are
reported on the system's logger.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from pymavlog._constants import (
    PATH_GLIDE_AIRSPEED_EST,
    PATH_GLIDE_GROUNDSPEED,
    PATH_GLIDE_HDIST,
    PATH_GLIDE_HEADWIND,
    PATH_GLIDE_RATIO,
    PATH_GLIDE_RATIO_AVG,
    PATH_GLIDE_WIND_DIR,
    PATH_GLIDE_WIND_REL,
    PATH_GLIDE_WIND_SPEED,
)
from pymavlog.data import Timeseries
from pymavlog.ingestion.normalize import angle360
from pymavlog.postprocess._common import clear_outputs, derived, search_series

if TYPE_CHECKING:
    from pymavlog.system import MavSystem

PATTERN_POS_NORTH = r"\bPN\b"
PATTERN_POS_EAST = r"\bPE\b"
PATTERN_POS_DOWN = r"\bPD\b"

PATTERN_ROLL = r"\b[rR]oll\b"
PATTERN_PITCH = r"\b[pP]itch\b"
PATTERN_ACCX = r"\bAccX\b"
PATTERN_WIND_EAST = r"\bVWE\b"
PATTERN_WIND_NORTH = r"\bVWN\b"
PATTERN_YAW = r"\bYaw\b"
PATTERN_AIRSPEED = r"\bTrueSpeed\b"
PATTERN_VEL_EAST = r"NKF1/VE"
PATTERN_VEL_NORTH = r"NKF1/VN"
PATTERN_GPS_SPEED = r"GPS/Spd"
PATTERN_SINK = r"\bVD\b"
PATTERN_GPS_SINK = r"GPS/VZ"

_VEL_OUTPUTS = (
    PATH_GLIDE_GROUNDSPEED,
    PATH_GLIDE_WIND_DIR,
    PATH_GLIDE_WIND_SPEED,
    PATH_GLIDE_WIND_REL,
    PATH_GLIDE_HEADWIND,
    PATH_GLIDE_AIRSPEED_EST,
    PATH_GLIDE_RATIO,
    PATH_GLIDE_RATIO_AVG,
)


# ------------------------------------------------------------------
# Position based
# ------------------------------------------------------------------


def postprocess_glideperf_pos(system: MavSystem) -> None:
    """Cumulative horizontal distance from north/east/down positions.

    North samples drive the output; east is interpolated at their times.
    """
    clear_outputs(system, PATH_GLIDE_HDIST)
    north = search_series(system, PATTERN_POS_NORTH)
    east = search_series(system, PATTERN_POS_EAST)
    down = search_series(system, PATTERN_POS_DOWN)
    if north is None or east is None or down is None:
        system.logger.debug("#%d: postproc/glideperf: no position data", system.system_id)
        return

    dist = derived(system, PATH_GLIDE_HDIST, Timeseries, "m", north.epoch_datastart)
    if dist is None:
        return

    times = np.asarray(north.times(), dtype=float)
    xs = np.asarray(north.values(), dtype=float)
    ys = np.asarray([east.get_data_at_time(t) for t in north.times()], dtype=float)
    steps = np.hypot(np.diff(xs), np.diff(ys))
    cumulative = np.concatenate(([0.0], np.cumsum(steps)))
    for t, d in zip(times.tolist(), cumulative.tolist(), strict=True):
        dist.add_elem(d, t)


# ------------------------------------------------------------------
# Velocity based
# ------------------------------------------------------------------


def _find_airspeed(system: MavSystem) -> Timeseries | None:
    airspeed = search_series(system, PATTERN_AIRSPEED)
    if airspeed is not None and airspeed.get_range() <= system.config.glide_speed_min:
        system.logger.warning(
            "#%d: postproc/glideperf: ignoring airspeed '%s' because of low variance",
            system.system_id,
            airspeed.fullname,
        )
        return None
    return airspeed


def _find_groundspeed(system: MavSystem) -> Timeseries | None:
    vel_east = search_series(system, PATTERN_VEL_EAST)
    vel_north = search_series(system, PATTERN_VEL_NORTH)
    if vel_east is not None and vel_north is not None:
        fused = derived(system, PATH_GLIDE_GROUNDSPEED, Timeseries, "VE and VN", vel_east.epoch_datastart)
        if fused is not None:
            for t, ve in vel_east:
                vn = vel_north.get_data_at_time(t)
                if vn is None:
                    system.logger.warning("#%d: postproc/glideperf: failed getting ground speed", system.system_id)
                    continue
                fused.add_elem(math.hypot(ve, vn), t)
            return fused

    gps_speed = search_series(system, PATTERN_GPS_SPEED)
    if gps_speed is not None and gps_speed.get_range() > system.config.glide_speed_min:
        return gps_speed
    return None


def _report_inputs(system: MavSystem, found: dict[str, Timeseries | None], have_wind: bool) -> None:
    log = system.logger
    sid = system.system_id
    for label in ("roll angle", "acc x", "pitch angle", "sink speed"):
        unit = found[label]
        if unit is None:
            log.error("#%d: postproc/glideperf: %s not found in data", sid, label)
        else:
            log.info("#%d: postproc/glideperf: using %s '%s'", sid, label, unit.fullname)

    airspeed = found["airspeed"]
    groundspeed = found["groundspeed"]
    if groundspeed is not None:
        log.info("#%d: postproc/glideperf: using groundspeed '%s'", sid, groundspeed.fullname)
    elif airspeed is None:
        log.error("#%d: postproc/glideperf: groundspeed not found in data", sid)

    if airspeed is not None:
        log.info("#%d: postproc/glideperf: using airspeed '%s'", sid, airspeed.fullname)
    elif groundspeed is None:
        log.error("#%d: postproc/glideperf: airspeed not found in data", sid)
    elif have_wind:
        log.info("#%d: postproc/glideperf: airspeed is reconstructed from groundspeed and wind estimates", sid)
    else:
        log.warning(
            "#%d: postproc/glideperf: airspeed not found, but groundspeed without wind estimates. "
            "Results may be bogus.",
            sid,
        )


def _compute_wind(
    system: MavSystem,
    wind_east: Timeseries,
    wind_north: Timeseries,
    yaw: Timeseries,
    groundspeed: Timeseries | None,
) -> Timeseries | None:
    """Derive wind direction, speed, relative angle and head wind.

    With a groundspeed series, also derives an airspeed estimate
    compensated for head wind, which is returned.
    """
    epoch = wind_east.epoch_datastart
    winddir_out = derived(
        system, PATH_GLIDE_WIND_DIR, Timeseries, "degree, coming from (aeronautic convention)", epoch
    )
    windspd_out = derived(system, PATH_GLIDE_WIND_SPEED, Timeseries, "same units as VWE and VWN", epoch)
    windrel_out = derived(
        system, PATH_GLIDE_WIND_REL, Timeseries, "degree between yaw angle and wind direction", epoch
    )
    headwind_out = derived(system, PATH_GLIDE_HEADWIND, Timeseries, "same units as VWE and VWN", epoch)
    if winddir_out is None or windspd_out is None or windrel_out is None or headwind_out is None:
        return None
    airspeed_out: Timeseries | None = None
    if groundspeed is not None:
        airspeed_out = derived(system, PATH_GLIDE_AIRSPEED_EST, Timeseries, "same units as VWE and VWN", epoch)

    for t, w_east in wind_east:
        w_north = wind_north.get_data_at_time(t)
        heading = yaw.get_data_at_time(t)
        if w_north is None or heading is None:
            continue
        # Wind components point where the wind blows to; direction is where it comes from.
        winddir = angle360(math.degrees(math.atan2(-w_east, -w_north)))
        windspd = math.hypot(w_east, w_north)
        yaw_rad = math.radians(angle360(heading))
        inv_rad = math.radians(angle360(winddir - 180.0))
        cos_rel = math.cos(inv_rad) * math.cos(yaw_rad) + math.sin(inv_rad) * math.sin(yaw_rad)
        windrel = math.acos(min(max(cos_rel, -1.0), 1.0))
        headwind = -math.cos(windrel) * windspd

        winddir_out.add_elem(winddir, t)
        windspd_out.add_elem(windspd, t)
        windrel_out.add_elem(math.degrees(windrel), t)
        headwind_out.add_elem(headwind, t)
        if airspeed_out is not None and groundspeed is not None:
            gspeed = groundspeed.get_data_at_time(t)
            airspeed_out.add_elem((gspeed or 0.0) + headwind, t)
    return airspeed_out


def postprocess_glideperf_vel(system: MavSystem) -> None:
    """Glide ratio over quasi-steady flight, plus wind reconstruction.

    A sink-rate sample contributes ``airspeed / sink / cos(roll)`` when sink
    is positive, airspeed exceeds the configured minimum, and pitch, roll
    and longitudinal acceleration are within their bounds. Airspeed comes
    from a sensor when one is usable, else from the wind-compensated
    estimate, else from groundspeed.
    """
    config = system.config
    log = system.logger
    clear_outputs(system, *_VEL_OUTPUTS)

    roll = search_series(system, PATTERN_ROLL)
    accx = search_series(system, PATTERN_ACCX)
    pitch = search_series(system, PATTERN_PITCH)
    wind_east = search_series(system, PATTERN_WIND_EAST)
    wind_north = search_series(system, PATTERN_WIND_NORTH)
    yaw = search_series(system, PATTERN_YAW)
    have_wind = wind_east is not None and wind_north is not None and yaw is not None
    airspeed = _find_airspeed(system)
    groundspeed = _find_groundspeed(system)
    sink = search_series(system, PATTERN_SINK)
    if sink is None:
        sink = search_series(system, PATTERN_GPS_SINK)

    _report_inputs(
        system,
        {
            "roll angle": roll,
            "acc x": accx,
            "pitch angle": pitch,
            "sink speed": sink,
            "airspeed": airspeed,
            "groundspeed": groundspeed,
        },
        have_wind,
    )

    airspeed_est: Timeseries | None = None
    if have_wind and wind_east is not None and wind_north is not None and yaw is not None:
        log.info("#%d: postproc/glideperf: using wind '%s' and related", system.system_id, wind_east.fullname)
        airspeed_est = _compute_wind(system, wind_east, wind_north, yaw, groundspeed)

    if roll is None or pitch is None or accx is None or sink is None:
        return
    speed_source = airspeed
    if speed_source is None and airspeed_est is not None and airspeed_est.is_present():
        speed_source = airspeed_est
    if speed_source is None:
        speed_source = groundspeed
    if speed_source is None:
        return

    ratio_out = derived(system, PATH_GLIDE_RATIO, Timeseries, "ratio", sink.epoch_datastart)
    ratio_avg_out = derived(system, PATH_GLIDE_RATIO_AVG, Timeseries, "ratio", sink.epoch_datastart)
    if ratio_out is None or ratio_avg_out is None:
        return

    max_ratio = 0.0
    best_speed = 0.0
    for t, sink_rate in sink:
        if sink_rate <= 0.0:
            continue
        speed = speed_source.get_data_at_time(t) or 0.0
        pitch_deg = pitch.get_data_at_time(t) or 0.0
        roll_deg = roll.get_data_at_time(t) or 0.0
        acc = accx.get_data_at_time(t) or 0.0
        if not (
            speed > config.glide_speed_min
            and abs(pitch_deg) < config.glide_pitch_max_deg
            and abs(roll_deg) < config.glide_roll_max_deg
            and abs(acc) < config.glide_accx_max
        ):
            continue
        ratio = speed / sink_rate / math.cos(math.radians(abs(roll_deg)))
        ratio_out.add_elem(ratio, t)
        if ratio > max_ratio:
            max_ratio = ratio
            best_speed = speed

    ratio_out.moving_average(ratio_avg_out, config.glide_average_window_s)
    if max_ratio > 0.0:
        log.info(
            "#%d: postproc/glideperf: estimated max. glide ratio of %.2f at speed %.2f",
            system.system_id,
            max_ratio,
            best_speed,
        )
