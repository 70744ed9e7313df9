"""Named group node of the hierarchy tree."""

from __future__ import annotations

import weakref

from pymavlog.data import DataUnit


class DataGroup:
    """A node holding child groups and data units.

    The parent link is a weak reference used for navigation only; a group is
    owned by its parent's ``groups`` mapping (or by the store's root map).
    """

    __slots__ = ("name", "groups", "data", "_parent", "__weakref__")

    def __init__(self, name: str, parent: DataGroup | None = None) -> None:
        self.name = name
        self.groups: dict[str, DataGroup] = {}
        self.data: dict[str, DataUnit] = {}
        self._parent: weakref.ReferenceType[DataGroup] | None = weakref.ref(parent) if parent is not None else None

    def __repr__(self) -> str:
        return f"DataGroup({self.path!r}, groups={len(self.groups)}, data={len(self.data)})"

    @property
    def parent(self) -> DataGroup | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def path(self) -> str:
        parts = [self.name]
        group = self.parent
        while group is not None:
            parts.append(group.name)
            group = group.parent
        return "/".join(reversed(parts))

    def is_empty(self) -> bool:
        return not self.groups and not self.data
