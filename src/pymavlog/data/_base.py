"""Base class of the data unit family.

A data unit is a named, typed container for one measured or derived
quantity. The family is closed: :class:`~pymavlog.data.Timeseries`,
:class:`~pymavlog.data.Event` and :class:`~pymavlog.data.Parameter`. Callers
dispatch on capability (``unit.is_timed``) or on the concrete class, never
on a deeper hierarchy.
"""

from __future__ import annotations

import copy
import enum
import logging
import weakref
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pymavlog.exceptions import MergeTypeMismatchError
from pymavlog.models.export import UnitExport

if TYPE_CHECKING:
    from pymavlog.store.group import DataGroup

_logger = logging.getLogger(__name__)


class DataKind(enum.StrEnum):
    """Whether a unit was ingested directly or computed by a pipeline pass."""

    RAW = "raw"
    DERIVED = "derived"


class DataUnit(ABC):
    """Common behaviour of all data units.

    Parameters
    ----------
    name : str
        Basename of the unit. The full path is derived from the group the
        unit is attached to.
    units : str
        Units-of-measure text.
    kind : DataKind
        Raw or derived.
    epoch_datastart : int
        Epoch baseline in microseconds: the absolute time corresponding to
        relative time zero of this unit's samples.
    """

    variant: ClassVar[str] = ""
    is_timed: ClassVar[bool] = False

    def __init__(
        self,
        name: str,
        units: str = "",
        *,
        kind: DataKind = DataKind.RAW,
        epoch_datastart: int = 0,
    ) -> None:
        self.name = name
        self.units = units
        self.kind = kind
        self.epoch_datastart = epoch_datastart
        self._parent: weakref.ReferenceType[DataGroup] | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.fullname!r}, n={len(self)}, kind={self.kind.value})"

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    @property
    def parent(self) -> DataGroup | None:
        """Group holding this unit. Navigation only; the group owns the unit."""
        if self._parent is None:
            return None
        return self._parent()

    def _attach(self, group: DataGroup | None) -> None:
        self._parent = weakref.ref(group) if group is not None else None

    @property
    def fullname(self) -> str:
        parts = [self.name]
        group = self.parent
        while group is not None:
            parts.append(group.name)
            group = group.parent
        return "/".join(reversed(parts))

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @abstractmethod
    def __len__(self) -> int: ...

    def size(self) -> int:
        return len(self)

    def is_present(self) -> bool:
        """Whether the unit holds any data (an empty unit is a placeholder)."""
        return len(self) > 0

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def _copy_payload(self) -> None:
        """Replace mutable containers with copies. Called on a fresh duplicate."""

    def clone(self) -> Self:
        """Return a deep, detached copy of this unit."""
        dup = copy.copy(self)
        dup._parent = None
        dup._copy_payload()
        return dup

    @property
    def epoch_dataend(self) -> int:
        return self.epoch_datastart

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge_in(self, other: DataUnit) -> bool:
        """Merge *other*'s samples into this unit.

        Returns ``False`` (and leaves this unit unchanged) when the two units
        have incompatible representations.
        """
        try:
            if type(other) is not type(self):
                raise MergeTypeMismatchError(
                    f"cannot merge {type(other).__name__} into {type(self).__name__}",
                    existing=type(self).__name__,
                    incoming=type(other).__name__,
                )
            self._merge_payload(other)
        except MergeTypeMismatchError as exc:
            _logger.debug("merge of %s rejected: %s", self.name, exc)
            return False
        if not self.units:
            self.units = other.units
        return True

    @abstractmethod
    def _merge_payload(self, other: Self) -> None: ...

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _export_fields(self) -> dict[str, Any]:
        return {}

    def export(self) -> UnitExport:
        """Return a detached, read-only view of this unit."""
        return UnitExport(
            path=self.fullname,
            name=self.name,
            variant=self.variant,
            units=self.units,
            kind=self.kind.value,
            epoch_datastart=self.epoch_datastart,
            **self._export_fields(),
        )
