"""One tracked vehicle: its data store, clock and analysis entry points."""

from __future__ import annotations

import logging
import math
from typing import Any

from pymavlog._constants import USEC_PER_SEC
from pymavlog._system.link import LinkCounters
from pymavlog._system.merge import add_unit, merge_systems
from pymavlog._system.summary import build_summary
from pymavlog._system.tracking import TrackingMixin
from pymavlog.config import SystemConfig
from pymavlog.data import DataUnit, TimedUnit
from pymavlog.models.export import UnitExport
from pymavlog.models.link import LinkStats
from pymavlog.models.system import AutopilotType, VehicleType
from pymavlog.postprocess import run_pipeline
from pymavlog.store import HierarchyStore
from pymavlog.timesync import TimeSync

_logger = logging.getLogger(__name__)


class MavSystem(TrackingMixin):
    """Complete telemetry state of one vehicle.

    Not thread-safe: a system must be mutated by one thread at a time.
    Distinct systems are independent.

    Parameters
    ----------
    system_id : int
        Vehicle identifier (e.g. the MAVLink system id).
    config : SystemConfig, optional
        Thresholds used by time synchronisation and the analysis passes.
    logger : logging.Logger, optional
        Diagnostic channel. Defaults to ``pymavlog.system.<system_id>``.
    """

    def __init__(
        self,
        system_id: int,
        *,
        config: SystemConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.system_id = system_id
        self.config = config or SystemConfig()
        self._logger = logger or _logger.getChild(str(system_id))
        self.vehicle_type = VehicleType.UNKNOWN
        self.autopilot_type = AutopilotType.UNKNOWN
        self.has_been_armed = False
        # Set by loaders that defer reading samples; only clock bounds are known.
        self.deferred_load = False
        self.store = HierarchyStore(logger=self._logger)
        self.timesync = TimeSync(self.config, logger=self._logger, system_id=system_id)
        self._link = LinkCounters()

    def __repr__(self) -> str:
        return f"MavSystem(id={self.system_id}, type={self.vehicle_type_str!r}, units={len(self.store)})"

    def __deepcopy__(self, memo: dict[int, Any]) -> MavSystem:
        return self.clone()

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def vehicle_type_str(self) -> str:
        return self.vehicle_type.label

    @property
    def autopilot_type_str(self) -> str:
        return self.autopilot_type.label

    @property
    def time(self) -> float:
        """Current relative time in seconds."""
        return self.timesync.time

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, path: str, is_pattern: bool = False) -> DataUnit | None:
        """Unit at *path*, or the first one whose path matches the pattern."""
        return self.store.find(path, is_pattern)

    def units(self) -> list[DataUnit]:
        return self.store.units()

    def paths(self) -> list[str]:
        return self.store.paths()

    def remove_unit(self, path: str) -> bool:
        return self.store.remove(path) is not None

    def export(self) -> dict[str, UnitExport]:
        """Read-only views of all units, keyed by path."""
        return {path: unit.export() for path, unit in self.store.items()}

    def link_stats(self) -> LinkStats:
        return self._link.snapshot()

    def summary(self) -> str:
        return build_summary(self)

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def is_absolute_time(self, timestamp_usec: int) -> bool:
        return self.timesync.is_absolute_time(timestamp_usec)

    def shift_time(self, delay_s: float) -> None:
        self.timesync.shift_time(delay_s)

    def determine_absolute_time(self) -> int:
        """Determine the absolute offset and apply it as every unit's epoch baseline."""
        offset = self.timesync.determine_offset()
        for unit in self.store.units():
            unit.epoch_datastart = offset
        return offset

    def _time_active_bounds_usec(self) -> tuple[int, int] | None:
        begin: int | None = None
        end: int | None = None
        for unit in self.store.units():
            if not isinstance(unit, TimedUnit) or not unit.is_present():
                continue
            first, last = unit.epoch_datafirst, unit.epoch_dataend
            begin = first if begin is None else min(begin, first)
            end = last if end is None else max(end, last)
        if begin is None or end is None:
            return None
        return begin, end

    def _time_relative_bounds_usec(self) -> tuple[int, int] | None:
        sync = self.timesync
        if not sync.have_time_update or not math.isfinite(sync.time_min):
            return None
        offset = sync.offset_usec
        return (
            offset + round(sync.time_min * USEC_PER_SEC),
            offset + round(sync.time_max * USEC_PER_SEC),
        )

    def _time_active_usec(self) -> tuple[int, int]:
        bounds = None
        if not self.deferred_load:
            bounds = self._time_active_bounds_usec()
        if bounds is None:
            bounds = self._time_relative_bounds_usec()
        return bounds if bounds is not None else (0, 0)

    def time_active_begin(self) -> float:
        """Earliest sample across all units, in epoch seconds.

        A system with ``deferred_load`` (or without samples) estimates it
        from the relative clock and the absolute offset.
        """
        return self._time_active_usec()[0] / USEC_PER_SEC

    def time_active_end(self) -> float:
        """Latest sample across all units, in epoch seconds."""
        return self._time_active_usec()[1] / USEC_PER_SEC

    # ------------------------------------------------------------------
    # Analysis and merge
    # ------------------------------------------------------------------

    def postprocess(self) -> None:
        """Run the analysis pipeline over the whole store."""
        run_pipeline(self)

    def add_unit(self, unit: DataUnit, path: str | None = None) -> bool:
        """Bring a copy of *unit* into this system, merging with an existing one."""
        return add_unit(self, unit, path)

    def merge(self, other: MavSystem) -> bool:
        """Merge all units of *other* (believed to be the same vehicle) into this system."""
        return merge_systems(self, other)

    merge_in = merge

    def clone(self, *, logger: logging.Logger | None = None) -> MavSystem:
        """Independent deep copy with all units."""
        dup = MavSystem(self.system_id, config=self.config, logger=logger)
        dup.vehicle_type = self.vehicle_type
        dup.autopilot_type = self.autopilot_type
        dup.has_been_armed = self.has_been_armed
        dup.deferred_load = self.deferred_load
        dup.timesync = self.timesync.copy(logger=dup.logger)
        dup._link = self._link.copy()
        for path, unit in self.store.items():
            dup.store.register(path, unit.clone())
        return dup
