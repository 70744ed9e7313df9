"""Link accounting models."""

from __future__ import annotations

from pydantic import Field

from pymavlog.models._base import MavBaseModel, MavEnum


class LinkOutcome(MavEnum):
    """How the decoder handled one received message."""

    UNKNOWN = -1
    INTERPRETED = 0
    UNINTERPRETED = 1
    ERROR = 2


class LinkStats(MavBaseModel):
    """Snapshot of the link-accounting counters of one system.

    Parameters
    ----------
    num_received : int
        Every message counted, regardless of outcome.
    num_interpreted : int
        Messages the decoder turned into samples.
    num_uninterpreted : int
        Messages the decoder recognised but did not use.
    num_error : int
        Messages that failed to decode.
    msgids_interpreted : tuple of int
        Sorted message identifiers seen with outcome ``INTERPRETED``.
    msgids_uninterpreted : tuple of int
        Sorted message identifiers seen with outcome ``UNINTERPRETED``.
    pending_throughput_bytes : int
        Bytes received since the last throughput sample was written.
    """

    num_received: int = 0
    num_interpreted: int = 0
    num_uninterpreted: int = 0
    num_error: int = 0
    msgids_interpreted: tuple[int, ...] = Field(default_factory=tuple)
    msgids_uninterpreted: tuple[int, ...] = Field(default_factory=tuple)
    pending_throughput_bytes: int = 0
