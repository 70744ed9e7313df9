"""pymavlog - Per-vehicle telemetry store, time synchronisation and flight analysis."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pymavlog")
except PackageNotFoundError:
    __version__ = "0+local"
from pymavlog.config import SystemConfig
from pymavlog.data import DataKind, DataUnit, Event, Parameter, TimedUnit, Timeseries
from pymavlog.exceptions import (
    MavlogConfigError,
    MavlogError,
    MavlogPathError,
    MergeTypeMismatchError,
)
from pymavlog.models import (
    AutopilotType,
    LinkOutcome,
    LinkStats,
    ReferencePair,
    SystemStatus,
    TimeState,
    TimeUpdateStatus,
    UnitExport,
    VehicleType,
)
from pymavlog.store import DataGroup, HierarchyStore
from pymavlog.system import MavSystem
from pymavlog.timesync import TimeSync

__all__ = [
    "__version__",
    "AutopilotType",
    "DataGroup",
    "DataKind",
    "DataUnit",
    "Event",
    "HierarchyStore",
    "LinkOutcome",
    "LinkStats",
    "MavSystem",
    "MavlogConfigError",
    "MavlogError",
    "MavlogPathError",
    "MergeTypeMismatchError",
    "Parameter",
    "ReferencePair",
    "SystemConfig",
    "SystemStatus",
    "TimeState",
    "TimeSync",
    "TimeUpdateStatus",
    "TimedUnit",
    "Timeseries",
    "UnitExport",
    "VehicleType",
]
