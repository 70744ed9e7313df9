"""Relative clock tracking and absolute-time offset determination.

A :class:`TimeSync` follows the device-relative clock of one system. The
first relative timestamp is trusted unconditionally; later ones are rejected
when they jump too far backwards or forwards, unless the caller allows
jumps. Observed ``(relative, absolute)`` reference pairs are averaged into
the offset that turns relative sample times into epoch time.
"""

from __future__ import annotations

import datetime
import logging
import math

from pymavlog._constants import ABSOLUTE_TIME_MIN_YEAR, USEC_PER_SEC
from pymavlog.config import SystemConfig
from pymavlog.ingestion.normalize import safe_float, safe_int
from pymavlog.models.time import ReferencePair, TimeState, TimeUpdateStatus

_logger = logging.getLogger(__name__)


def _round_div(numerator: int, denominator: int) -> int:
    """Integer division rounding to nearest, halves away from zero."""
    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return quotient if numerator >= 0 else -quotient


class TimeSync:
    """Clock state machine of one system.

    Parameters
    ----------
    config : SystemConfig
        Provides the jump thresholds.
    logger : logging.Logger, optional
        Diagnostic channel of the owning system.
    system_id : int
        Used in diagnostic messages only.
    """

    def __init__(
        self,
        config: SystemConfig | None = None,
        *,
        logger: logging.Logger | None = None,
        system_id: int = 0,
    ) -> None:
        self._config = config or SystemConfig()
        self._logger = logger or _logger
        self._system_id = system_id
        self.state = TimeState.UNINITIALIZED
        self.time = 0.0
        self.time_min = math.inf
        self.time_max = -math.inf
        self.have_time_update = False
        self.offset_usec = 0
        self.offset_guess_usec = 0
        self.reference_pairs: list[ReferencePair] = []

    @property
    def is_valid(self) -> bool:
        return self.state is TimeState.VALID

    def update_rel_time(self, relative_usec: int, allow_jumps: bool = False) -> TimeUpdateStatus:
        """Feed a relative timestamp.

        Returns
        -------
        TimeUpdateStatus
            ``ACCEPTED`` when the clock moved, ``INVALID`` for a timestamp
            that is not a finite number, otherwise the direction of the
            rejected jump. A rejected update changes nothing.
        """
        parsed = safe_float(relative_usec)
        if parsed is None:
            self._logger.warning("#%d: ignoring invalid timestamp %r", self._system_id, relative_usec)
            return TimeUpdateStatus.INVALID
        candidate = parsed / USEC_PER_SEC
        diff = 0.0
        if self.state is TimeState.VALID:
            diff = candidate - self.time
        else:
            self.state = TimeState.VALID

        if diff < -self._config.max_backward_jump_s and not allow_jumps:
            self._logger.warning(
                "#%d: ignoring timestamp that is too old: %.3f s",
                self._system_id,
                diff,
            )
            return TimeUpdateStatus.BACKWARD_JUMP
        if diff > self._config.max_forward_jump_s and not allow_jumps:
            self._logger.warning(
                "#%d: ignoring timestamp that fast-forwarded by %.3f s",
                self._system_id,
                diff,
            )
            return TimeUpdateStatus.FORWARD_JUMP

        self.time_min = min(self.time_min, candidate)
        self.time_max = max(self.time_max, candidate)
        self.time = candidate
        self.have_time_update = True
        return TimeUpdateStatus.ACCEPTED

    def update_time_offset(
        self,
        relative_usec: int,
        epoch_usec: int,
        allow_jumps: bool = False,
    ) -> TimeUpdateStatus:
        """Feed a relative timestamp and record it as a reference pair.

        Both times are truncated to whole microseconds. When either is not a
        number, nothing changes and ``INVALID`` is returned.
        """
        relative = safe_int(relative_usec)
        epoch = safe_int(epoch_usec)
        if relative is None or epoch is None:
            self._logger.warning(
                "#%d: ignoring invalid time reference (%r, %r)",
                self._system_id,
                relative_usec,
                epoch_usec,
            )
            return TimeUpdateStatus.INVALID
        status = self.update_rel_time(relative, allow_jumps)
        if epoch > 0:
            self.reference_pairs.append(ReferencePair(relative_usec=relative, epoch_usec=epoch))
        return status

    def update_time_offset_guess(self, relative_usec: int, epoch_usec: int) -> bool:
        """Remember ``epoch - relative`` as the fallback offset.

        Ignored when either time is not a number, *epoch_usec* is not
        positive, or it is earlier than *relative_usec*.
        """
        relative = safe_int(relative_usec)
        epoch = safe_int(epoch_usec)
        if relative is None or epoch is None or epoch <= 0:
            return False
        if relative > epoch:
            self._logger.warning(
                "#%d: ignoring time offset guess, relative time %d is past epoch %d",
                self._system_id,
                relative,
                epoch,
            )
            return False
        self.offset_guess_usec = epoch - relative
        return True

    def determine_offset(self) -> int:
        """Compute and store the absolute offset in microseconds.

        The mean of ``epoch - relative`` over all reference pairs, rounded to
        the nearest microsecond. Without reference pairs the guess offset is
        used and a warning is logged.
        """
        if self.reference_pairs:
            total = sum(pair.offset_usec for pair in self.reference_pairs)
            self.offset_usec = _round_div(total, len(self.reference_pairs))
        else:
            self.offset_usec = self.offset_guess_usec
            self._logger.warning(
                "#%d: no time reference available; making a guess: %s",
                self._system_id,
                _format_epoch(self.offset_usec),
            )
        return self.offset_usec

    def shift_time(self, delay_s: float) -> None:
        """Translate the reference pairs and the guess offset by *delay_s*."""
        delay_usec = int(delay_s * USEC_PER_SEC)
        self.reference_pairs = [
            ReferencePair(relative_usec=pair.relative_usec - delay_usec, epoch_usec=pair.epoch_usec)
            for pair in self.reference_pairs
        ]
        self.offset_guess_usec += delay_usec

    @staticmethod
    def is_absolute_time(timestamp_usec: int) -> bool:
        """Whether a raw timestamp looks like UNIX epoch time (year > 2000)."""
        try:
            when = datetime.datetime.fromtimestamp(timestamp_usec / USEC_PER_SEC, tz=datetime.UTC)
        except (OverflowError, OSError, ValueError):
            return timestamp_usec > 0
        return when.year > ABSOLUTE_TIME_MIN_YEAR

    def copy(self, *, logger: logging.Logger | None = None) -> TimeSync:
        """Independent copy bound to *logger* (default: this one's)."""
        dup = TimeSync(self._config, logger=logger or self._logger, system_id=self._system_id)
        dup.state = self.state
        dup.time = self.time
        dup.time_min = self.time_min
        dup.time_max = self.time_max
        dup.have_time_update = self.have_time_update
        dup.offset_usec = self.offset_usec
        dup.offset_guess_usec = self.offset_guess_usec
        dup.reference_pairs = list(self.reference_pairs)
        return dup


def _format_epoch(epoch_usec: int) -> str:
    try:
        return datetime.datetime.fromtimestamp(epoch_usec / USEC_PER_SEC, tz=datetime.UTC).isoformat()
    except (OverflowError, OSError, ValueError):
        return f"{epoch_usec} us"
