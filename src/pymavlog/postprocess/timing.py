"""Timing repair of periodic series with unreliable timestamps."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymavlog._constants import ORIG_SUFFIX
from pymavlog.data import TimedUnit

if TYPE_CHECKING:
    from pymavlog.system import MavSystem


def postprocess_bad_timing(system: MavSystem) -> None:
    """Spread the samples of badly timestamped periodic units evenly.

    The unrepaired unit is kept next to the original as ``<name>_orig``. The
    pass iterates a snapshot of the store, since it registers new units.
    """
    config = system.config
    for path, unit in system.store.items():
        if not isinstance(unit, TimedUnit) or unit.name.endswith(ORIG_SUFFIX):
            continue
        if not unit.has_bad_timestamps(
            min_samples=config.bad_timing_min_samples,
            jitter_ratio=config.bad_timing_jitter_ratio,
        ):
            continue
        if unit.first_time == unit.last_time:
            system.logger.debug("cannot fix timing of %s: all samples share one timestamp", path)
            continue

        backup = unit.clone()
        backup.periodic = False
        system.store.register(path + ORIG_SUFFIX, backup)

        unit.make_periodic()
        system.logger.info("fixed timing of %s (made periodic)", path)
