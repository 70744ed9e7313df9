"""Merge operations for :class:`pymavlog.system.MavSystem`.

These functions keep `system.py` small without changing the public API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymavlog.data import DataUnit
from pymavlog.exceptions import MavlogPathError
from pymavlog.store import normalize_path

if TYPE_CHECKING:
    from pymavlog.system import MavSystem


def add_unit(system: MavSystem, unit: DataUnit, path: str | None = None) -> bool:
    """Bring a copy of *unit* into *system* at *path* (default: its own path).

    An existing non-empty unit merges the incoming samples; an empty one is
    a placeholder and is replaced by the copy. Returns ``False`` when
    nothing could be added.
    """
    try:
        key = normalize_path(path if path is not None else unit.fullname)
    except MavlogPathError as exc:
        system.logger.warning("#%d: cannot add data %r: %s", system.system_id, unit.name, exc)
        return False

    existing = system.store.find(key)
    if existing is not None:
        if existing.is_present():
            return existing.merge_in(unit)
        system.store.unregister(existing)
    system.store.register(key, unit.clone())
    return True


def merge_systems(system: MavSystem, other: MavSystem) -> bool:
    """Merge every unit of *other* into *system*, then recompute.

    Units that cannot be merged are skipped with a warning. When anything
    was added the pipeline is re-run and absolute time redetermined.
    """
    added = False
    for path, unit in other.store.items():
        if add_unit(system, unit, path):
            added = True
        else:
            system.logger.warning(
                "#%d: skipped data %s because it could not be merged",
                system.system_id,
                path,
            )
    if added:
        system.postprocess()
        system.determine_absolute_time()
    return True
