from __future__ import annotations

import copy
import logging
import math

import pytest

from pymavlog import MavSystem, SystemConfig
from pymavlog.data import Event, Timeseries
from pymavlog.models import AutopilotType, LinkOutcome, TimeUpdateStatus, VehicleType

SEC = 1_000_000


def _at(system: MavSystem, t: float) -> None:
    assert system.advance_time(int(t * SEC)) is TimeUpdateStatus.ACCEPTED


def _flight(system: MavSystem) -> None:
    profile = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 5.0, 50.0), (3.0, 5.0, 50.0), (4.0, 0.0, 0.0)]
    for t, alt, throttle in profile:
        _at(system, t)
        system.track_value("airstate/alt GND", alt, "m")
        system.track_value("airstate/throttle", throttle, "%")
        system.track_sysperf(20.0, 12.6 - t * 0.1, 2.0 + t)


def _samples(system: MavSystem) -> dict[str, tuple[object, ...]]:
    return {path: exported.samples + exported.values for path, exported in system.export().items()}


def test_system_logger_is_named_after_id() -> None:
    system = MavSystem(42)
    assert system.logger.name == "pymavlog.system.42"
    assert repr(system) == "MavSystem(id=42, type='unknown', units=0)"


def test_injected_logger_is_used(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("custom.vehicle")
    system = MavSystem(1, logger=logger)

    with caplog.at_level(logging.WARNING):
        system.track_value("bad", 1.0)

    assert system.logger is logger
    assert any(record.name == "custom.vehicle" for record in caplog.records)


class TestTracking:
    def test_heartbeat_is_edge_triggered(self) -> None:
        system = MavSystem(1)
        _at(system, 1.0)
        system.track_system(1, 4, 3, 0x80 | 0x10, 5)
        _at(system, 2.0)
        system.track_system(1, 4, 3, 0x80 | 0x10, 5)
        _at(system, 3.0)
        system.track_system(1, 3, 3, 0, 5)

        armed = system.find("mission/armed")
        assert list(armed) == [(1.0, "armed"), (3.0, "disarmed")]
        assert list(system.find("mission/stabilized")) == [(1.0, "stabilized on"), (3.0, "stabilized off")]
        assert list(system.find("system/status")) == [(1.0, "active"), (3.0, "standby")]
        assert len(system.find("mission/guided")) == 1
        assert system.find("system/custom_mode").values() == (5, 5, 5)
        assert system.has_been_armed
        assert system.vehicle_type is VehicleType.FIXED_WING
        assert system.vehicle_type_str == "fixed wing"
        assert system.autopilot_type is AutopilotType.ARDUPILOTMEGA

    def test_uninitialised_status_label(self) -> None:
        system = MavSystem(1)
        system.track_system(2, 0, 12, 0, 0)

        assert system.find("system/status").get_latest() == "uninitialized"
        assert not system.has_been_armed

    def test_vehicle_type_change_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        system = MavSystem(1)
        system.track_system(1, 4, 3, 0, 0)

        with caplog.at_level(logging.WARNING):
            system.track_system(2, 4, 3, 0, 0)

        assert system.vehicle_type is VehicleType.QUADROTOR
        assert "changes type from fixed wing to quadrotor" in caplog.text

    def test_non_positive_battery_readings_dropped(self) -> None:
        system = MavSystem(1)
        system.track_sysperf(35.0, -1.0, 2.0)

        voltage = system.find("power/battery_voltage")
        assert isinstance(voltage, Timeseries)
        assert len(voltage) == 0
        assert voltage.units == "V"
        assert system.find("power/battery_current").values() == (2.0,)
        assert system.find("computer/autopilot_load").values() == (35.0,)

    def test_out_of_range_heading_dropped(self) -> None:
        system = MavSystem(1)
        system.track_paths(47.1, 8.5, 10.0, 500.0, 400.0)

        assert len(system.find("airstate/heading")) == 0
        assert system.find("airstate/lat").values() == (47.1,)
        assert system.find("airstate/alt MSL").values() == (500.0,)

    def test_flightperf_does_not_store_alt_msl(self) -> None:
        system = MavSystem(1)
        system.track_flightperf(15.0, 14.0, 300.0, 1.0, 40.0)

        assert len(system.find("airstate/alt MSL")) == 0
        assert system.find("airstate/throttle").values() == (40.0,)

    def test_attitude_converted_to_degrees(self) -> None:
        system = MavSystem(1)
        system.track_paths_attitude([math.pi, 0.0, -math.pi / 2], [0.0, math.pi / 4, 0.0])

        assert system.find("airstate/angles/roll").values() == pytest.approx([180.0])
        assert system.find("airstate/angles/yaw").values() == pytest.approx([-90.0])
        assert system.find("airstate/rate/pitch rate").values() == pytest.approx([45.0])
        assert system.find("airstate/angles/roll").units == "deg"

    def test_imu_scaled_and_periodic(self) -> None:
        system = MavSystem(1)
        system.track_imu(1, [1000, -2000, 500], [0, 0, 0], [0, 0, 0])

        acc_x = system.find("IMU1/acc/acc x")
        assert acc_x.values() == (1.0,)
        assert acc_x.periodic
        assert system.find("IMU1/acc/acc y").values() == (-2.0,)
        assert system.find("IMU1/gyro/omg z") is not None

    def test_unknown_gps_fix_dropped(self) -> None:
        system = MavSystem(1)
        system.track_gps_status(9, 255)
        system.track_gps_status(10, 3)

        assert system.find("GPS/fix type").values() == (3,)
        assert system.find("GPS/num sat").values() == (9, 10)

    def test_statustext_logs_every_message(self) -> None:
        system = MavSystem(1)
        system.track_statustext(b"PreArm: check\x00\x00", 4)
        system.track_statustext("PreArm: check", 4)

        text = system.find("system/statustext")
        assert isinstance(text, Event)
        assert text.values() == ("PreArm: check", "PreArm: check")
        assert system.find("system/statustext_severity").values() == (4, 4)

    def test_radio_without_details_only_writes_rssi(self) -> None:
        system = MavSystem(1)
        system.track_radio(80)

        assert [path for path in system.paths() if path.startswith("radio/")] == ["radio/RSSI"]

    def test_rc_limited_to_eight_channels(self) -> None:
        system = MavSystem(1)
        system.track_rc(list(range(1000, 1010)))

        assert len([path for path in system.paths() if path.startswith("rc/")]) == 8
        assert system.find("rc/channel_8").values() == (1007,)

    def test_track_value_rejects_bad_input(self, caplog: pytest.LogCaptureFixture) -> None:
        system = MavSystem(1)

        with caplog.at_level(logging.WARNING):
            assert not system.track_value("voltage", 1.0)
        assert not system.track_value("ATT/Roll", "nan")

        assert "cannot track 'voltage'" in caplog.text
        assert len(system.find("ATT/Roll")) == 0

    def test_track_value_writes_at_current_time(self) -> None:
        system = MavSystem(1)
        assert system.track_value("ATT/Roll", 3.0)
        _at(system, 2.5)
        assert system.track_value("ATT/Roll", 4.0)

        assert list(system.find("ATT/Roll")) == [(0.0, 3.0), (2.5, 4.0)]


class TestLink:
    def test_throughput_written_once_per_clock_step(self) -> None:
        system = MavSystem(1)
        system.track_link(64, 0, LinkOutcome.INTERPRETED)
        throughput = system.find("radio/throughput")
        assert len(throughput) == 0

        _at(system, 1.0)
        system.track_link(64, 30, LinkOutcome.INTERPRETED)
        system.track_link(128, 99, LinkOutcome.UNINTERPRETED)
        system.track_link(10, 1, 2)

        assert list(throughput) == [(1.0, 1.0)]
        stats = system.link_stats()
        assert stats.num_received == 4
        assert stats.num_interpreted == 2
        assert stats.num_uninterpreted == 1
        assert stats.num_error == 1
        assert stats.msgids_interpreted == (0, 30)
        assert stats.msgids_uninterpreted == (99,)
        assert stats.pending_throughput_bytes == 138

    def test_next_clock_step_flushes_accumulator(self) -> None:
        system = MavSystem(1)
        _at(system, 1.0)
        system.track_link(128, 0, LinkOutcome.INTERPRETED)
        system.track_link(256, 0, LinkOutcome.INTERPRETED)
        _at(system, 2.0)
        system.track_link(0, 0, LinkOutcome.INTERPRETED)

        assert list(system.find("radio/throughput")) == [(1.0, 1.0), (2.0, 2.0)]
        assert system.link_stats().pending_throughput_bytes == 0


class TestTime:
    def test_absolute_time_applied_to_units(self) -> None:
        system = MavSystem(7)
        system.update_time_offset(1 * SEC, 1_600_000_001 * SEC)
        system.track_value("airstate/throttle", 10.0)
        _at(system, 5.0)
        system.track_value("airstate/throttle", 20.0)

        assert system.determine_absolute_time() == 1_600_000_000 * SEC

        assert system.find("airstate/throttle").epoch_datastart == 1_600_000_000 * SEC
        assert system.time_active_begin() == 1_600_000_001.0
        assert system.time_active_end() == 1_600_000_005.0

    def test_active_time_grows_monotonically(self) -> None:
        system = MavSystem(1)
        previous = (system.time_active_begin(), system.time_active_end())
        assert previous == (0.0, 0.0)

        for k in range(1, 20):
            _at(system, float(k))
            system.track_value("ATT/Roll", float(k))
            begin, end = system.time_active_begin(), system.time_active_end()
            assert begin <= end
            if k > 1:
                assert begin == previous[0]
                assert end >= previous[1]
            previous = (begin, end)

        assert previous == (1.0, 19.0)

    def test_deferred_load_uses_clock_bounds(self) -> None:
        system = MavSystem(1)
        _at(system, 2.0)
        system.track_value("ATT/Roll", 1.0)
        _at(system, 8.0)
        system.deferred_load = True

        assert system.time_active_begin() == 2.0
        assert system.time_active_end() == 8.0
        assert "Power:" not in system.summary()

    def test_rejected_jump_keeps_clock(self) -> None:
        system = MavSystem(1, config=SystemConfig(max_backward_jump_s=1.0))
        _at(system, 10.0)

        assert system.advance_time(5 * SEC) is TimeUpdateStatus.BACKWARD_JUMP
        assert system.time == 10.0
        assert system.advance_time(5 * SEC, allow_jumps=True) is TimeUpdateStatus.ACCEPTED
        assert system.time == 5.0


class TestSummary:
    def test_sections(self) -> None:
        system = MavSystem(3)
        system.track_system(1, 4, 3, 0x80, 0)
        _flight(system)
        system.postprocess()

        text = system.summary()

        for header in ("General:", "Power:", "Flight Book:", "Flight performance:", "Last Position:", "Link:"):
            assert header in text
        assert "   - id: 3" in text
        assert "   - type: fixed wing" in text
        assert "   - autopilot: ArduPilotMega" in text
        assert "   - has_been_armed: 1" in text
        assert "   - battery voltage: 12.6 ... 12.2 V" in text
        assert "   - battery current: 2 ... 6 A" in text
        assert "   - number of flights: 1" in text
        assert "   - total flight time: 00:00:02" in text
        assert "   - throttle: 0 ... 50 %" in text
        assert "   - rel. alt: 0 m" in text
        assert "   - max. autopilot load: 20 %" in text
        assert "   - errors: 0" in text
        assert "active for 00:00:04 between" in text

    def test_empty_system(self) -> None:
        text = MavSystem(1).summary()

        assert "   - type: unknown" in text
        assert "battery voltage" not in text
        assert "   - received total: 0 (IDs: )" in text


class TestMergeAndClone:
    def test_clone_is_independent(self) -> None:
        system = MavSystem(1)
        _flight(system)
        system.track_link(10, 4, LinkOutcome.INTERPRETED)

        dup = system.clone()
        dup.track_value("airstate/throttle", 99.0)
        dup.track_link(10, 5, LinkOutcome.INTERPRETED)

        assert system.find("airstate/throttle").get_last() == (4.0, 0.0)
        assert dup.find("airstate/throttle").get_last() == (4.0, 99.0)
        assert system.link_stats().num_received == 1
        assert dup.link_stats().num_received == 2
        assert dup.logger.name == "pymavlog.system.1"

    def test_deepcopy_clones(self) -> None:
        system = MavSystem(1)
        _flight(system)

        dup = copy.deepcopy(system)

        assert isinstance(dup, MavSystem)
        assert dup.paths() == system.paths()
        assert dup.find("airstate/alt GND") is not system.find("airstate/alt GND")
        assert dup.store.check_consistency()

    def test_merge_with_own_clone_is_stable(self) -> None:
        system = MavSystem(1)
        _flight(system)
        system.track_flightperf(15.0, 14.0, 300.0, 1.0, 0.0)
        system.postprocess()
        before = _samples(system)

        assert system.merge(system.clone())

        assert _samples(system) == before
        assert system.store.check_consistency()

    def test_merge_adds_missing_units_and_recomputes(self) -> None:
        system = MavSystem(1)
        other = MavSystem(1)
        _flight(other)

        assert system.merge_in(other)

        assert system.find("airstate/alt GND").values() == other.find("airstate/alt GND").values()
        assert system.find("airstate/alt GND") is not other.find("airstate/alt GND")
        assert system.find("flightbook/number flights").get_value() == 1
        assert other.find("flightbook/number flights") is None

    def test_merge_skips_type_mismatch(self, caplog: pytest.LogCaptureFixture) -> None:
        system = MavSystem(1)
        system.track_system(1, 4, 3, 0, 0)
        other = MavSystem(1)
        other.track_value("mission/armed", 1.0)
        other.track_value("GPS/lat", 47.0)

        with caplog.at_level(logging.WARNING):
            assert system.merge(other)

        assert "skipped data mission/armed because it could not be merged" in caplog.text
        assert isinstance(system.find("mission/armed"), Event)
        assert system.find("GPS/lat").values() == (47.0,)

    def test_placeholder_replaced_by_incoming_unit(self) -> None:
        system = MavSystem(1)
        system.store.register("mission/mode", Timeseries("mode"))
        incoming: Event[str] = Event("mode")
        incoming.add_elem("auto", 1.0)

        assert system.add_unit(incoming, "mission/mode")

        unit = system.find("mission/mode")
        assert isinstance(unit, Event)
        assert unit is not incoming
        assert unit.values() == ("auto",)

    def test_add_unit_merges_present_unit(self) -> None:
        system = MavSystem(1)
        system.track_value("GPS/lat", 47.0)
        incoming = Timeseries("lat")
        incoming.add_elem(48.0, 1.0)

        assert system.add_unit(incoming, "GPS/lat")

        assert list(system.find("GPS/lat")) == [(0.0, 47.0), (1.0, 48.0)]

    def test_add_unit_needs_a_group_path(self, caplog: pytest.LogCaptureFixture) -> None:
        system = MavSystem(1)

        with caplog.at_level(logging.WARNING):
            assert not system.add_unit(Timeseries("lat"))

        assert len(system.store) == 0
        assert "cannot add data 'lat'" in caplog.text


def test_export_and_remove() -> None:
    system = MavSystem(1)
    system.track_value("GPS/lat", 47.0, "deg")

    exported = system.export()

    assert list(exported) == ["GPS/lat"]
    assert exported["GPS/lat"].units == "deg"
    assert system.remove_unit("GPS/lat")
    assert not system.remove_unit("GPS/lat")
    assert system.paths() == []
