"""Hierarchy store: a tree of named groups plus a flat path index.

The flat index and the tree are kept in exact correspondence. Every unit
reachable by walking the tree appears in the index under its full path, and
every indexed unit is attached to exactly one group. Groups left without
children or units are pruned, recursively, up to the root map.

All validation happens before the first mutation, so a failing call leaves
the store untouched.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from pymavlog.data import DataUnit
from pymavlog.exceptions import MavlogPathError
from pymavlog.store.group import DataGroup

_logger = logging.getLogger(__name__)

TUnit = TypeVar("TUnit", bound=DataUnit)


def split_path(path: str) -> list[str]:
    """Split *path* into trimmed, non-empty segments.

    Raises :class:`MavlogPathError` unless there is at least one group
    segment and a basename.
    """
    segments = [segment.strip() for segment in path.strip().split("/")]
    segments = [segment for segment in segments if segment]
    if len(segments) < 2:
        raise MavlogPathError(f"path must be of the form 'group/name', got {path!r}", path=path)
    return segments


def normalize_path(path: str) -> str:
    return "/".join(split_path(path))


class HierarchyStore:
    """Tree of :class:`DataGroup` nodes with an O(1) path index."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger
        self._groups: dict[str, DataGroup] = {}
        self._index: dict[str, DataUnit] = {}

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        try:
            return normalize_path(path) in self._index
        except MavlogPathError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths())

    @property
    def groups(self) -> Mapping[str, DataGroup]:
        """Read-only view of the top-level groups."""
        return MappingProxyType(self._groups)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(self, path: str, unit: TUnit) -> TUnit:
        """Attach *unit* at *path*, creating intermediate groups.

        A different unit already registered at *path* is unregistered first.
        Re-registering a unit of this store under a new path moves it.
        """
        segments = split_path(path)
        key = "/".join(segments)

        if unit.parent is not None:
            if self._index.get(unit.fullname) is not unit:
                raise MavlogPathError(f"unit {unit.name!r} is attached to another hierarchy", path=key)
            self.unregister(unit)

        existing = self._index.get(key)
        if existing is not None and existing is not unit:
            self.unregister(existing)

        group = self._groups.get(segments[0])
        if group is None:
            group = DataGroup(segments[0])
            self._groups[segments[0]] = group
        for segment in segments[1:-1]:
            child = group.groups.get(segment)
            if child is None:
                child = DataGroup(segment, group)
                group.groups[segment] = child
            group = child

        unit.name = segments[-1]
        group.data[unit.name] = unit
        unit._attach(group)
        self._index[key] = unit
        self._logger.debug("data: %s", key)
        return unit

    def unregister(self, unit: DataUnit) -> bool:
        """Detach *unit* and prune any group chain it leaves empty.

        Returns ``False`` if the unit is not registered in this store.
        """
        group = unit.parent
        if group is None:
            return False
        key = unit.fullname
        if self._index.get(key) is not unit or group.data.get(unit.name) is not unit:
            return False

        del self._index[key]
        del group.data[unit.name]
        unit._attach(None)
        self._prune(group)
        return True

    def remove(self, path: str) -> DataUnit | None:
        """Unregister and return the unit at *path*, if any."""
        unit = self.find(path)
        if unit is None:
            return None
        self.unregister(unit)
        return unit

    def clear(self) -> None:
        for unit in self._index.values():
            unit._attach(None)
        self._index.clear()
        self._groups.clear()

    def _prune(self, group: DataGroup | None) -> None:
        while group is not None and group.is_empty():
            parent = group.parent
            owner = parent.groups if parent is not None else self._groups
            if owner.get(group.name) is group:
                del owner[group.name]
            group = parent

    def ensure(self, path: str, cls: type[TUnit], units: str = "", **kwargs: Any) -> TUnit | None:
        """Return the unit at *path*, creating an empty *cls* if absent.

        Returns ``None`` (and logs a warning) when *path* already holds a
        unit of another type.
        """
        key = normalize_path(path)
        unit = self._index.get(key)
        if unit is None:
            created = cls(key.rsplit("/", 1)[-1], units, **kwargs)
            return self.register(key, created)
        if not isinstance(unit, cls):
            self._logger.warning(
                "data %s is a %s, cannot use it as %s",
                key,
                type(unit).__name__,
                cls.__name__,
            )
            return None
        return unit

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, path: str, is_pattern: bool = False, cls: type[TUnit] | None = None) -> Any:
        """Return the unit at *path*, or ``None``.

        With ``is_pattern=True``, *path* is a regular expression and the
        first unit in sorted-path order whose path it matches (``re.search``)
        is returned. With *cls*, units of other types are skipped.
        """
        if is_pattern:
            return next(self.find_all(path, cls), None)
        try:
            unit = self._index.get(normalize_path(path))
        except MavlogPathError:
            return None
        if unit is None or (cls is not None and not isinstance(unit, cls)):
            return None
        return unit

    def find_all(self, pattern: str, cls: type[TUnit] | None = None) -> Iterator[Any]:
        """Yield units whose path matches *pattern*, in sorted-path order."""
        try:
            regex = re.compile(pattern)
        except re.error:
            self._logger.debug("invalid search pattern %r", pattern)
            return
        for path in sorted(self._index):
            if regex.search(path) is None:
                continue
            unit = self._index[path]
            if cls is None or isinstance(unit, cls):
                yield unit

    def paths(self) -> list[str]:
        return sorted(self._index)

    def units(self) -> list[DataUnit]:
        return [self._index[path] for path in sorted(self._index)]

    def items(self) -> list[tuple[str, DataUnit]]:
        """Snapshot of ``(path, unit)`` pairs in sorted-path order."""
        return [(path, self._index[path]) for path in sorted(self._index)]

    def walk(self) -> Iterator[tuple[str, DataUnit]]:
        """Depth-first walk of the group tree, yielding ``(path, unit)``."""

        def _walk(group: DataGroup, prefix: str) -> Iterator[tuple[str, DataUnit]]:
            path = f"{prefix}/{group.name}" if prefix else group.name
            for name in sorted(group.data):
                yield f"{path}/{name}", group.data[name]
            for name in sorted(group.groups):
                yield from _walk(group.groups[name], path)

        for name in sorted(self._groups):
            yield from _walk(self._groups[name], "")

    def check_consistency(self) -> bool:
        """Whether the tree and the flat index correspond exactly."""
        seen: dict[str, DataUnit] = {}
        for path, unit in self.walk():
            if path in seen or self._index.get(path) is not unit:
                return False
            seen[path] = unit
        if len(seen) != len(self._index):
            return False

        stack = list(self._groups.values())
        while stack:
            group = stack.pop()
            if group.is_empty():
                return False
            stack.extend(group.groups.values())
        return True
