"""Postprocessing pipeline.

Passes run in a fixed order over a system's whole store. Every pass clears
and fully recomputes its own derived outputs, so running the pipeline again
on unchanged raw data reproduces identical results. A pass that lacks its
inputs does nothing; a pass that fails is logged and the remaining passes
still run.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from pymavlog.postprocess.flightbook import postprocess_flightbook
from pymavlog.postprocess.glideperf import postprocess_glideperf_pos, postprocess_glideperf_vel
from pymavlog.postprocess.powerstats import postprocess_powerstats
from pymavlog.postprocess.timing import postprocess_bad_timing

if TYPE_CHECKING:
    from pymavlog.system import MavSystem

PostprocessPass = Callable[["MavSystem"], None]

PIPELINE: tuple[tuple[str, PostprocessPass], ...] = (
    ("bad_timing", postprocess_bad_timing),
    ("flightbook", postprocess_flightbook),
    ("powerstats", postprocess_powerstats),
    ("glideperf_pos", postprocess_glideperf_pos),
    ("glideperf_vel", postprocess_glideperf_vel),
)


def run_pipeline(system: MavSystem) -> None:
    for name, step in PIPELINE:
        try:
            step(system)
        except Exception:
            system.logger.exception("#%d: postproc/%s failed", system.system_id, name)


__all__ = [
    "PIPELINE",
    "PostprocessPass",
    "postprocess_bad_timing",
    "postprocess_flightbook",
    "postprocess_glideperf_pos",
    "postprocess_glideperf_vel",
    "postprocess_powerstats",
    "run_pipeline",
]
