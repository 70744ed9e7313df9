"""Value objects and enumerations exchanged with pymavlog callers."""

from pymavlog.models._base import MavBaseModel, MavEnum
from pymavlog.models.export import UnitExport
from pymavlog.models.link import LinkOutcome, LinkStats
from pymavlog.models.system import AutopilotType, SystemStatus, VehicleType
from pymavlog.models.time import ReferencePair, TimeState, TimeUpdateStatus

__all__ = [
    "AutopilotType",
    "LinkOutcome",
    "LinkStats",
    "MavBaseModel",
    "MavEnum",
    "ReferencePair",
    "SystemStatus",
    "TimeState",
    "TimeUpdateStatus",
    "UnitExport",
    "VehicleType",
]
