"""Enumerations describing a tracked vehicle."""

from __future__ import annotations

from pymavlog.models._base import MavEnum

_VEHICLE_TYPE_LABELS: dict[int, str] = {
    0: "generic",
    1: "fixed wing",
    2: "quadrotor",
    3: "coax",
    4: "heli",
    5: "antennatracker",
    6: "GCS",
    7: "airship",
    8: "balloon",
    9: "rocket",
    10: "rover",
    11: "boat",
    12: "submarine",
    13: "hexarotor",
    14: "octarotor",
    15: "tricopter",
    16: "flapwing",
    17: "kite",
    18: "onboard controller",
}

_AUTOPILOT_TYPE_LABELS: dict[int, str] = {
    0: "generic",
    2: "Slugs",
    3: "ArduPilotMega",
    4: "OpenPilot",
    12: "PX4",
}


class VehicleType(MavEnum):
    """MAVLink ``MAV_TYPE``."""

    UNKNOWN = -1
    GENERIC = 0
    FIXED_WING = 1
    QUADROTOR = 2
    COAXIAL = 3
    HELICOPTER = 4
    ANTENNA_TRACKER = 5
    GCS = 6
    AIRSHIP = 7
    FREE_BALLOON = 8
    ROCKET = 9
    GROUND_ROVER = 10
    SURFACE_BOAT = 11
    SUBMARINE = 12
    HEXAROTOR = 13
    OCTOROTOR = 14
    TRICOPTER = 15
    FLAPPING_WING = 16
    KITE = 17
    ONBOARD_CONTROLLER = 18

    @property
    def label(self) -> str:
        return _VEHICLE_TYPE_LABELS.get(int(self), "unknown")


class AutopilotType(MavEnum):
    """MAVLink ``MAV_AUTOPILOT``."""

    UNKNOWN = -1
    GENERIC = 0
    PIXHAWK = 1
    SLUGS = 2
    ARDUPILOTMEGA = 3
    OPENPILOT = 4
    PX4 = 12

    @property
    def label(self) -> str:
        # PIXHAWK (1) is a reserved id and has no label.
        return _AUTOPILOT_TYPE_LABELS.get(int(self), "unknown")


class SystemStatus(MavEnum):
    """MAVLink ``MAV_STATE``."""

    UNKNOWN = -1
    UNINIT = 0
    BOOT = 1
    CALIBRATING = 2
    STANDBY = 3
    ACTIVE = 4
    CRITICAL = 5
    EMERGENCY = 6
    POWEROFF = 7

    @property
    def label(self) -> str:
        if self is SystemStatus.UNINIT:
            return "uninitialized"
        return super().label
