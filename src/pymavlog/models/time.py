"""Time synchronisation models."""

from __future__ import annotations

import enum

from pydantic import Field

from pymavlog.models._base import MavBaseModel


class TimeUpdateStatus(enum.IntEnum):
    """Outcome of feeding a relative timestamp to a system.

    ``INVALID`` marks a timestamp that is not a finite number; like a
    rejected jump, it leaves the clock untouched.
    """

    BACKWARD_JUMP = -1
    ACCEPTED = 0
    FORWARD_JUMP = 1
    INVALID = 2


class TimeState(enum.StrEnum):
    UNINITIALIZED = "uninitialized"
    VALID = "valid"


class ReferencePair(MavBaseModel):
    """One observed correlation between the device clock and real time.

    Parameters
    ----------
    relative_usec : int
        Device-relative time in microseconds.
    epoch_usec : int
        Absolute UNIX time in microseconds at the same instant.
    """

    relative_usec: int
    epoch_usec: int = Field(gt=0)

    @property
    def offset_usec(self) -> int:
        return self.epoch_usec - self.relative_usec
