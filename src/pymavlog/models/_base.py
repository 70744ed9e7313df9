"""Base model and enum for pymavlog value objects.

Value objects handed to callers inherit from :class:`MavBaseModel`, a frozen
pydantic model that rejects unknown fields.

Small integer enumerations decoded by the ingestion layer inherit from
:class:`MavEnum`, which adds an ``UNKNOWN`` member at ``-1`` and a
``_missing_`` hook returning ``UNKNOWN`` for any value without a mapped
member.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict


class MavEnum(enum.IntEnum):
    """Base for decoded enumerations.

    Every subclass **must** define ``UNKNOWN = -1``.
    """

    @classmethod
    def _missing_(cls, value: object) -> MavEnum:
        # pylint: disable=no-member
        if hasattr(cls, "UNKNOWN"):
            unknown: MavEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))

    @property
    def label(self) -> str:
        """Human-readable text of the member."""
        return self.name.lower().replace("_", " ")


class MavBaseModel(BaseModel):
    """Base for immutable value objects."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
