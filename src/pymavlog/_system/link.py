"""Mutable link-accounting counters of one system."""

from __future__ import annotations

from dataclasses import dataclass, field

from pymavlog.models.link import LinkStats


@dataclass(slots=True)
class LinkCounters:
    num_received: int = 0
    num_interpreted: int = 0
    num_uninterpreted: int = 0
    num_error: int = 0
    msgids_interpreted: set[int] = field(default_factory=set)
    msgids_uninterpreted: set[int] = field(default_factory=set)
    throughput_bytes: int = 0
    last_sample_time: float | None = None

    def copy(self) -> LinkCounters:
        return LinkCounters(
            num_received=self.num_received,
            num_interpreted=self.num_interpreted,
            num_uninterpreted=self.num_uninterpreted,
            num_error=self.num_error,
            msgids_interpreted=set(self.msgids_interpreted),
            msgids_uninterpreted=set(self.msgids_uninterpreted),
            throughput_bytes=self.throughput_bytes,
            last_sample_time=self.last_sample_time,
        )

    def snapshot(self) -> LinkStats:
        return LinkStats(
            num_received=self.num_received,
            num_interpreted=self.num_interpreted,
            num_uninterpreted=self.num_uninterpreted,
            num_error=self.num_error,
            msgids_interpreted=tuple(sorted(self.msgids_interpreted)),
            msgids_uninterpreted=tuple(sorted(self.msgids_uninterpreted)),
            pending_throughput_bytes=self.throughput_bytes,
        )
