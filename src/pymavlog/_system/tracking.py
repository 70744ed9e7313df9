"""Track operations of :class:`pymavlog.system.MavSystem`.

Each operation takes already-decoded values of one telemetry group and
writes them at the system's current relative time. Output units are
resolved (or created empty) before any value is checked, so a rejected
sample still leaves its unit in place. Values that are not finite numbers
are dropped silently.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from pymavlog._constants import (
    BYTES_PER_KBIT,
    MODE_FLAG_GUIDED_ENABLED,
    MODE_FLAG_MANUAL_INPUT_ENABLED,
    MODE_FLAG_SAFETY_ARMED,
    MODE_FLAG_STABILIZE_ENABLED,
    PATH_THROUGHPUT,
)
from pymavlog.data import Event, Timeseries
from pymavlog.exceptions import MavlogPathError
from pymavlog.ingestion.normalize import in_range, safe_float, safe_int, safe_str, to_enum
from pymavlog.models.link import LinkOutcome
from pymavlog.models.system import AutopilotType, SystemStatus, VehicleType
from pymavlog.models.time import TimeUpdateStatus

if TYPE_CHECKING:
    from pymavlog._system.link import LinkCounters
    from pymavlog.store import HierarchyStore
    from pymavlog.timesync import TimeSync

Converter = Callable[[Any], float | int | None]

_AXES = ("x", "y", "z")


class TrackingMixin:
    """Ingestion surface: one ``track_*`` method per telemetry group."""

    system_id: int
    store: HierarchyStore
    timesync: TimeSync
    has_been_armed: bool
    vehicle_type: VehicleType
    autopilot_type: AutopilotType
    _link: LinkCounters
    _logger: logging.Logger

    # ------------------------------------------------------------------
    # Unit resolution
    # ------------------------------------------------------------------

    def _series(self, path: str, units: str = "", *, periodic: bool = False) -> Timeseries | None:
        return self.store.ensure(
            path,
            Timeseries,
            units,
            epoch_datastart=self.timesync.offset_usec,
            periodic=periodic,
        )

    def _event(self, path: str, units: str = "") -> Event[Any] | None:
        return self.store.ensure(path, Event, units, epoch_datastart=self.timesync.offset_usec)

    def _record(
        self,
        path: str,
        units: str,
        value: Any,
        *,
        convert: Converter = safe_float,
        periodic: bool = False,
    ) -> bool:
        series = self._series(path, units, periodic=periodic)
        if series is None:
            return False
        parsed = convert(value)
        if parsed is None:
            return False
        series.add_elem(parsed, self.timesync.time)
        return True

    def _record_axes(
        self,
        prefix: str,
        units: str,
        values: Sequence[Any],
        *,
        divisor: float = 1.0,
        periodic: bool = False,
    ) -> None:
        """Write a 3-vector to ``<prefix> x``, ``<prefix> y`` and ``<prefix> z``."""
        if len(values) < len(_AXES):
            self._logger.debug("#%d: dropping %s sample with %d components", self.system_id, prefix, len(values))
            return
        for axis, value in zip(_AXES, values, strict=False):
            parsed = safe_float(value)
            self._record(
                f"{prefix} {axis}",
                units,
                parsed / divisor if parsed is not None else None,
                periodic=periodic,
            )

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def advance_time(self, relative_usec: int, allow_jumps: bool = False) -> TimeUpdateStatus:
        """Move the relative clock, rejecting implausible jumps."""
        return self.timesync.update_rel_time(relative_usec, allow_jumps)

    update_rel_time = advance_time

    def update_time_offset(
        self,
        relative_usec: int,
        epoch_usec: int,
        allow_jumps: bool = False,
    ) -> TimeUpdateStatus:
        """Move the relative clock and record a ``(relative, epoch)`` reference pair."""
        return self.timesync.update_time_offset(relative_usec, epoch_usec, allow_jumps)

    def update_time_offset_guess(self, relative_usec: int, epoch_usec: int) -> bool:
        return self.timesync.update_time_offset_guess(relative_usec, epoch_usec)

    # ------------------------------------------------------------------
    # System state
    # ------------------------------------------------------------------

    def track_system(
        self,
        vehicle_type: int,
        status: int,
        autopilot_type: int,
        base_mode: int,
        custom_mode: int,
    ) -> None:
        """Heartbeat: mode flags, system status and vehicle classification.

        Mode and status events are edge triggered: a value is logged only
        when it differs from the latest one.
        """
        evt_armed = self._event("mission/armed")
        evt_stabilized = self._event("mission/stabilized")
        evt_guided = self._event("mission/guided")
        evt_manual = self._event("mission/manual")
        evt_status = self._event("system/status", "MAV_STATE_ENUM")
        if evt_armed is None or evt_stabilized is None or evt_guided is None:
            return
        if evt_manual is None or evt_status is None:
            return
        self._record("system/custom_mode", "autopilot-specific mode", custom_mode, convert=safe_int)

        t = self.timesync.time
        state = to_enum(SystemStatus, status, SystemStatus.UNKNOWN)
        evt_status.add_if_changed(state.label, t)

        mode = safe_int(base_mode) or 0
        armed = bool(mode & MODE_FLAG_SAFETY_ARMED)
        evt_armed.add_if_changed("armed" if armed else "disarmed", t)
        if armed:
            self.has_been_armed = True
        evt_stabilized.add_if_changed(
            "stabilized on" if mode & MODE_FLAG_STABILIZE_ENABLED else "stabilized off", t
        )
        evt_guided.add_if_changed("guided on" if mode & MODE_FLAG_GUIDED_ENABLED else "guided off", t)
        evt_manual.add_if_changed("manual on" if mode & MODE_FLAG_MANUAL_INPUT_ENABLED else "manual off", t)

        vtype = to_enum(VehicleType, vehicle_type)
        if vtype is not None and vtype is not self.vehicle_type:
            if self.vehicle_type is not VehicleType.UNKNOWN:
                self._logger.warning(
                    "#%d: vehicle changes type from %s to %s",
                    self.system_id,
                    self.vehicle_type.label,
                    vtype.label,
                )
            self.vehicle_type = vtype

        aptype = to_enum(AutopilotType, autopilot_type)
        if aptype is not None and aptype is not self.autopilot_type:
            if self.autopilot_type is not AutopilotType.UNKNOWN:
                self._logger.warning(
                    "#%d: vehicle changes autopilot from %s to %s",
                    self.system_id,
                    self.autopilot_type.label,
                    aptype.label,
                )
            self.autopilot_type = aptype

    def track_sysperf(self, load: float, bat_v: float, bat_a: float) -> None:
        """Autopilot load and battery readings. Non-positive battery readings are dropped."""
        self._record("computer/autopilot_load", "%", load)
        volts = safe_float(bat_v)
        amps = safe_float(bat_a)
        self._record("power/battery_voltage", "V", volts if volts is not None and volts > 0.0 else None)
        self._record("power/battery_current", "A", amps if amps is not None and amps > 0.0 else None)

    def track_ambient(self, temp_c: float, press_hpa: float) -> None:
        self._record("environment/temperature", "deg C", temp_c)
        self._record("environment/static pressure", "hPa", press_hpa)

    def track_link(self, length_bytes: int, msgid: int, outcome: LinkOutcome | int) -> None:
        """Count one received message.

        Received bytes accumulate until the relative clock has advanced;
        the first message after that writes the accumulated amount to the
        throughput series (in kbit) and restarts the accumulator.
        """
        series = self._series(PATH_THROUGHPUT, "kbps")
        if series is None:
            return
        link = self._link
        link.throughput_bytes += max(safe_int(length_bytes) or 0, 0)

        kind = to_enum(LinkOutcome, outcome, LinkOutcome.UNKNOWN)
        message_id = safe_int(msgid)
        if kind is LinkOutcome.INTERPRETED:
            link.num_interpreted += 1
            if message_id is not None:
                link.msgids_interpreted.add(message_id)
        elif kind is LinkOutcome.UNINTERPRETED:
            link.num_uninterpreted += 1
            if message_id is not None:
                link.msgids_uninterpreted.add(message_id)
        else:
            link.num_error += 1
        link.num_received += 1

        t = self.timesync.time
        if self.timesync.have_time_update and (link.last_sample_time is None or t != link.last_sample_time):
            series.add_elem(link.throughput_bytes / BYTES_PER_KBIT, t)
            link.throughput_bytes = 0
            link.last_sample_time = t

    # ------------------------------------------------------------------
    # Flight state
    # ------------------------------------------------------------------

    def track_flightperf(
        self,
        airspeed: float,
        groundspeed: float,
        alt_msl: float,
        climb: float,
        throttle: float,
    ) -> None:
        """VFR HUD values.

        *alt_msl* is accepted but not stored: some autopilots switch its
        reference between ground and sea level. :meth:`track_paths` provides it.
        """
        self._record("airstate/airspeed", "m/s", airspeed)
        self._record("airstate/groundspeed", "m/s", groundspeed)
        self._series("airstate/alt MSL", "m")
        self._record("airstate/climb", "m/s", climb)
        self._record("airstate/throttle", "%", throttle)

    def track_paths(self, lat: float, lon: float, alt_rel: float, alt_msl: float, heading: float) -> None:
        """Global position. Headings outside ``[0, 360]`` are dropped."""
        self._record("airstate/lat", "", lat)
        self._record("airstate/lon", "", lon)
        self._record("airstate/alt GND", "m", alt_rel)
        self._record("airstate/alt MSL", "m", alt_msl)
        self._record("airstate/heading", "deg", in_range(safe_float(heading), 0.0, 360.0))

    def track_paths_attitude(self, rpy_rad: Sequence[float], rates_rad: Sequence[float]) -> None:
        """Attitude and body rates, converted from radians to degrees."""
        if len(rpy_rad) < 3 or len(rates_rad) < 3:
            self._logger.debug("#%d: dropping incomplete attitude sample", self.system_id)
            return
        names = ("roll", "pitch", "yaw")
        for name, angle in zip(names, rpy_rad, strict=False):
            parsed = safe_float(angle)
            self._record(f"airstate/angles/{name}", "deg", math.degrees(parsed) if parsed is not None else None)
        for name, rate in zip(names, rates_rad, strict=False):
            parsed = safe_float(rate)
            self._record(f"airstate/rate/{name} rate", "deg/s", math.degrees(parsed) if parsed is not None else None)

    def track_paths_speed(self, v: Sequence[float]) -> None:
        if len(v) < 3:
            return
        for axis, value in zip(("vx", "vy", "vz"), v, strict=False):
            self._record(f"airstate/speed/{axis}", "m/s", value)

    def track_nav(
        self,
        nav_roll: float,
        nav_pitch: float,
        nav_bearing: float,
        target_bearing: float,
        wp_dist: float,
        err_alt: float,
        err_airspeed: float,
        err_xtrack: float,
    ) -> None:
        self._record("navigation/nav roll", "deg", nav_roll)
        self._record("navigation/nav pitch", "deg", nav_pitch)
        self._record("navigation/nav bearing", "deg", nav_bearing)
        self._record("navigation/target bearing", "deg", target_bearing)
        self._record("navigation/dist waypoint", "m", wp_dist)
        self._record("navigation/error altitude", "m", err_alt)
        self._record("navigation/error airspeed", "m/s", err_airspeed)
        self._record("navigation/error x-track", "m", err_xtrack)

    # ------------------------------------------------------------------
    # Mission
    # ------------------------------------------------------------------

    def track_mission_current(self, seq: int) -> None:
        self._record("mission/current seq", "item id", seq, convert=safe_int)

    def track_mission_item(
        self,
        target_system: int,
        target_component: int,
        seq: int,
        frame: int,
        command: int,
        current: int,
        autocontinue: int,
        param1: float,
        param2: float,
        param3: float,
        param4: float,
        x: float,
        y: float,
        z: float,
    ) -> None:
        self._record("mission/target system id", "item id", target_system, convert=safe_int)
        self._record("mission/component id", "item id", target_component, convert=safe_int)
        self._record("mission/seq", "item id", seq, convert=safe_int)
        self._record("mission/frame", "MAV_FRAME enum", frame, convert=safe_int)
        self._record("mission/command", "MAV_CMD enum", command, convert=safe_int)
        self._record("mission/current", "bool", current, convert=safe_int)
        self._record("mission/autocontinue", "", autocontinue, convert=safe_int)
        self._record("mission/param1", "MAV_CMD enum", param1)
        self._record("mission/param2", "MAV_CMD enum", param2)
        self._record("mission/param3", "MAV_CMD enum", param3)
        self._record("mission/param4", "MAV_CMD enum", param4)
        self._record("mission/x", "local: x pos. global: latitude", x)
        self._record("mission/y", "local: y pos. global: longitude", y)
        self._record("mission/z", "local: z pos. global: alt (rel. or abs.)", z)

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def track_rc(self, channels: Sequence[int]) -> None:
        """Raw RC input of up to 8 channels, in microseconds."""
        for k, value in enumerate(channels[:8], start=1):
            self._record(f"rc/channel_{k}", "us", value, convert=safe_int)

    def track_actuators(self, servos: Sequence[int]) -> None:
        """Raw servo output of up to 8 channels, in microseconds."""
        for k, value in enumerate(servos[:8], start=1):
            self._record(f"actuators/servo_{k}", "us", value, convert=safe_int)

    # ------------------------------------------------------------------
    # Sensors
    # ------------------------------------------------------------------

    def track_gps(
        self,
        lat: float,
        lon: float,
        alt_wgs84: float,
        hdop: float,
        vdop: float,
        vel: float,
        course: float,
    ) -> None:
        self._record("GPS/lat", "", lat)
        self._record("GPS/lon", "", lon)
        self._record("GPS/alt WGS84", "m", alt_wgs84)
        self._record("GPS/hdop", "m", hdop)
        self._record("GPS/vdop", "m", vdop)
        self._record("GPS/ground speed", "m/s", vel)
        self._record("GPS/ground course", "deg", course)

    def track_gps_status(self, n_sat: int, fix_type: int) -> None:
        """Satellite count and fix type. Fix type 255 means unknown and is dropped."""
        self._record("GPS/num sat", "", n_sat, convert=safe_int)
        fix = safe_int(fix_type)
        self._record("GPS/fix type", "", fix if fix is not None and fix < 255 else None, convert=safe_int)

    def track_imu(
        self,
        index: int,
        acc_mg: Sequence[int],
        gyr_mrads: Sequence[int],
        mag_mt: Sequence[int],
    ) -> None:
        """Scaled IMU readings of IMU *index* (milli-units are divided by 1000)."""
        prefix = f"IMU{index}"
        self._record_axes(f"{prefix}/acc/acc", "g", acc_mg, divisor=1000.0, periodic=True)
        self._record_axes(f"{prefix}/gyro/omg", "rad/s", gyr_mrads, divisor=1000.0, periodic=True)
        self._record_axes(f"{prefix}/magnetic/mag", "T", mag_mt, divisor=1000.0, periodic=True)

    def track_imu_highres_acc(self, xyz: Sequence[float]) -> None:
        self._record_axes("IMU-highres/acc/acc", "m/s/s", xyz, periodic=True)

    def track_imu_highres_gyr(self, xyz: Sequence[float]) -> None:
        self._record_axes("IMU-highres/gyro/omg", "rad/s", xyz, periodic=True)

    def track_imu_highres_mag(self, xyz: Sequence[float]) -> None:
        self._record_axes("IMU-highres/mag/field", "G", xyz, periodic=True)

    def track_imu_highres_temp(self, temp_c: float) -> None:
        self._record("IMU-highres/temperature", "deg C", temp_c, periodic=True)

    def track_imu_highres_pressabs(self, press_mbar: float) -> None:
        self._record("IMU-highres/pressure abs", "mbar", press_mbar, periodic=True)

    def track_imu_highres_pressalt(self, alt_m: float) -> None:
        self._record("IMU-highres/pressure altitude", "m", alt_m, periodic=True)

    def track_imu_highres_pressdiff(self, press_mbar: float) -> None:
        self._record("IMU-highres/pressure diff", "mbar", press_mbar, periodic=True)

    # ------------------------------------------------------------------
    # Radio and power
    # ------------------------------------------------------------------

    def track_radio(
        self,
        rssi: int,
        noise: int | None = None,
        rxerrors: int | None = None,
        rxerrors_fixed: int | None = None,
        txbuf_pct: int | None = None,
        remote_rssi: int | None = None,
        remote_noise: int | None = None,
    ) -> None:
        """Radio link quality. With only *rssi*, the other series are not touched."""
        self._record("radio/RSSI", "", rssi, convert=safe_int)
        if noise is None:
            return
        self._record("radio/noise", "", noise, convert=safe_int)
        self._record("radio/rx errors", "", rxerrors, convert=safe_int)
        self._record("radio/fixed rx errors", "", rxerrors_fixed, convert=safe_int)
        self._record("radio/tx buffer", "%", txbuf_pct, convert=safe_int)
        self._record("radio/remote RSSI", "", remote_rssi, convert=safe_int)
        self._record("radio/remote noise", "", remote_noise, convert=safe_int)

    def track_radio_droprate(self, pct: float) -> None:
        self._record("radio/overall drop rate", "", pct)

    def track_power(self, vcc: float, vservo: float, flags: int) -> None:
        self._record("power/Vcc", "V", vcc)
        self._record("power/Vservo", "V", vservo)
        self._record("power/flags", "MAV_POWER_STATUS", flags, convert=safe_int)

    # ------------------------------------------------------------------
    # System health
    # ------------------------------------------------------------------

    def track_system_errors(self, counts: Sequence[int]) -> None:
        for k, value in enumerate(counts[:4], start=1):
            self._record(f"system/error count #{k}", "AP-specific", value, convert=safe_int)

    def track_statustext(self, text: str | bytes, severity: int) -> None:
        """Free-text status message. Every message is logged, repeated or not."""
        evt_text = self._event("system/statustext", "string")
        if evt_text is None:
            return
        message = safe_str(text)
        if message is not None:
            evt_text.add_elem(message, self.timesync.time)
        self._record("system/statustext_severity", "int", severity, convert=safe_int)

    def track_system_sensors(self, present: int, enabled: int, health: int) -> None:
        self._record("system/sensors present", "MAV_SYS_STATUS_SENSOR", present, convert=safe_int)
        self._record("system/sensors enabled", "MAV_SYS_STATUS_SENSOR", enabled, convert=safe_int)
        self._record("system/sensors health", "MAV_SYS_STATUS_SENSOR", health, convert=safe_int)

    # ------------------------------------------------------------------
    # Generic
    # ------------------------------------------------------------------

    def track_value(self, path: str, value: Any, units: str = "", periodic: bool = False) -> bool:
        """Write one numeric sample to an arbitrary ``group/name`` path.

        Used for decoder-specific series such as onboard-log fields
        (``ATT/Roll``, ``NKF1/VE``). Returns ``False`` when the sample was
        dropped.
        """
        try:
            return self._record(path, units, value, periodic=periodic)
        except MavlogPathError as exc:
            self._logger.warning("#%d: cannot track %r: %s", self.system_id, path, exc)
            return False
