"""Scalar results without a time axis."""

from __future__ import annotations

from typing import Any, Generic, Self, TypeVar

from pymavlog.data._base import DataUnit

T = TypeVar("T")


class Parameter(DataUnit, Generic[T]):
    """Zero or a few scalar values, e.g. one number per pipeline run."""

    variant = "parameter"

    def __init__(self, name: str, units: str = "", **kwargs: Any) -> None:
        super().__init__(name, units, **kwargs)
        self._values: list[T] = []

    def __len__(self) -> int:
        return len(self._values)

    def clear(self) -> None:
        self._values = []

    def _copy_payload(self) -> None:
        self._values = list(self._values)

    def add_elem(self, value: T) -> None:
        self._values.append(value)

    def get_value(self) -> T | None:
        return self._values[0] if self._values else None

    def values(self) -> tuple[T, ...]:
        return tuple(self._values)

    def _merge_payload(self, other: Self) -> None:
        # Incoming values win.
        if other._values:
            self._values = list(other._values)

    def _export_fields(self) -> dict[str, Any]:
        return {"values": tuple(self._values)}
