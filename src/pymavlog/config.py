"""Per-system configuration for pymavlog."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pymavlog.exceptions import MavlogConfigError


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError as exc:
        raise MavlogConfigError(f"{key} must be a number, got {value!r}") from exc


def _env_int(env: Mapping[str, str], key: str) -> int | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise MavlogConfigError(f"{key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class SystemConfig:
    """Tunable constants of one tracked system.

    The defaults are the thresholds long used for ArduPilot logs. Pass a
    customised instance to :class:`pymavlog.system.MavSystem` to adapt the
    thresholds to a particular vehicle or autopilot.

    Parameters
    ----------
    max_backward_jump_s : float
        Relative-clock updates moving backwards by more than this are
        rejected unless jumps are explicitly allowed.
    max_forward_jump_s : float
        Relative-clock updates moving forwards by more than this are
        rejected unless jumps are explicitly allowed.
    takeoff_altitude_m : float
        Altitude above ground that must be exceeded to count as flying.
    takeoff_throttle_pct : float
        Throttle that must be exceeded to count as flying.
    glide_speed_min : float
        Minimum airspeed for a sample to enter the glide-ratio series. Also
        the minimum range a speed series must span to be trusted.
    glide_pitch_max_deg : float
        Maximum absolute pitch of a quasi-steady glide sample.
    glide_roll_max_deg : float
        Maximum absolute roll of a quasi-steady glide sample.
    glide_accx_max : float
        Maximum absolute longitudinal acceleration (m/s/s) of a quasi-steady
        glide sample.
    glide_average_window_s : float
        Window of the smoothed glide-ratio series.
    bad_timing_min_samples : int
        Series shorter than this are never considered for timing repair.
    bad_timing_jitter_ratio : float
        A periodic series whose sample-interval standard deviation exceeds
        this fraction of its mean interval is considered badly timestamped.
    """

    max_backward_jump_s: float = 5.0
    max_forward_jump_s: float = 100.0
    takeoff_altitude_m: float = 1.0
    takeoff_throttle_pct: float = 20.0
    glide_speed_min: float = 5.0
    glide_pitch_max_deg: float = 20.0
    glide_roll_max_deg: float = 45.0
    glide_accx_max: float = 2.0
    glide_average_window_s: float = 5.0
    bad_timing_min_samples: int = 10
    bad_timing_jitter_ratio: float = 0.5

    def __post_init__(self) -> None:
        if self.max_backward_jump_s < 0 or self.max_forward_jump_s < 0:
            raise MavlogConfigError("jump thresholds must be non-negative")
        if self.glide_average_window_s <= 0:
            raise MavlogConfigError("glide_average_window_s must be positive")
        if self.bad_timing_min_samples < 2:
            raise MavlogConfigError("bad_timing_min_samples must be at least 2")

    @classmethod
    def from_env(cls, **overrides: Any) -> SystemConfig:
        """Create configuration from ``MAVLOG_*`` environment variables.

        Each field maps to ``MAVLOG_<FIELD NAME IN UPPER CASE>``, e.g.
        ``MAVLOG_MAX_BACKWARD_JUMP_S``. Explicit keyword arguments override
        environment values.

        Raises
        ------
        MavlogConfigError
            If an environment variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(cls):
            if field.name in overrides:
                continue
            env_key = f"MAVLOG_{field.name.upper()}"
            if field.type in ("int", int):
                parsed: float | int | None = _env_int(env, env_key)
            else:
                parsed = _env_float(env, env_key)
            if parsed is not None:
                config_kwargs[field.name] = parsed

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
