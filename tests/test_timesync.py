from __future__ import annotations

import logging
import math

import pytest

from pymavlog.config import SystemConfig
from pymavlog.models import TimeState, TimeUpdateStatus
from pymavlog.timesync import TimeSync

SEC = 1_000_000


def test_first_update_is_trusted() -> None:
    sync = TimeSync()
    assert sync.state is TimeState.UNINITIALIZED

    status = sync.update_rel_time(5_000 * SEC)

    assert status is TimeUpdateStatus.ACCEPTED
    assert sync.is_valid
    assert sync.have_time_update
    assert sync.time == 5_000.0


def test_backward_jump_rejected_without_change(caplog: pytest.LogCaptureFixture) -> None:
    sync = TimeSync(system_id=3)
    sync.update_rel_time(100 * SEC)

    with caplog.at_level(logging.WARNING):
        status = sync.update_rel_time(50 * SEC)

    assert status is TimeUpdateStatus.BACKWARD_JUMP
    assert sync.time == 100.0
    assert sync.time_min == 100.0
    assert "#3" in caplog.text


def test_backward_jump_accepted_when_allowed() -> None:
    sync = TimeSync()
    sync.update_rel_time(100 * SEC)

    status = sync.update_rel_time(50 * SEC, allow_jumps=True)

    assert status is TimeUpdateStatus.ACCEPTED
    assert sync.time == 50.0
    assert sync.time_min == 50.0
    assert sync.time_max == 100.0


def test_small_backward_step_accepted() -> None:
    sync = TimeSync()
    sync.update_rel_time(100 * SEC)

    assert sync.update_rel_time(97 * SEC) is TimeUpdateStatus.ACCEPTED
    assert sync.time == 97.0


def test_forward_jump_rejected() -> None:
    sync = TimeSync()
    sync.update_rel_time(100 * SEC)

    assert sync.update_rel_time(300 * SEC) is TimeUpdateStatus.FORWARD_JUMP
    assert sync.time == 100.0
    assert sync.update_rel_time(190 * SEC) is TimeUpdateStatus.ACCEPTED
    assert sync.time_max == 190.0


def test_thresholds_come_from_config() -> None:
    sync = TimeSync(SystemConfig(max_forward_jump_s=10.0))
    sync.update_rel_time(0)

    assert sync.update_rel_time(20 * SEC) is TimeUpdateStatus.FORWARD_JUMP


def test_offset_is_mean_of_reference_pairs() -> None:
    sync = TimeSync()
    sync.update_time_offset(0, 1_000)
    sync.update_time_offset(10_000_000, 1_011_000_000)

    assert sync.determine_offset() == 500_500_500
    assert sync.offset_usec == 500_500_500


def test_offset_rounds_half_away_from_zero() -> None:
    sync = TimeSync()
    sync.update_time_offset(0, 1)
    sync.update_time_offset(0, 2)

    assert sync.determine_offset() == 2


def test_reference_pair_needs_positive_epoch() -> None:
    sync = TimeSync()

    sync.update_time_offset(1 * SEC, 0)

    assert sync.reference_pairs == []
    assert sync.time == 1.0


def test_offset_falls_back_to_guess(caplog: pytest.LogCaptureFixture) -> None:
    sync = TimeSync()
    assert sync.update_time_offset_guess(2 * SEC, 1_600_000_000 * SEC)

    with caplog.at_level(logging.WARNING):
        offset = sync.determine_offset()

    assert offset == 1_600_000_000 * SEC - 2 * SEC
    assert "guess" in caplog.text


def test_guess_ignored_when_invalid(caplog: pytest.LogCaptureFixture) -> None:
    sync = TimeSync()

    assert not sync.update_time_offset_guess(5, 0)
    with caplog.at_level(logging.WARNING):
        assert not sync.update_time_offset_guess(10 * SEC, 5 * SEC)

    assert sync.offset_guess_usec == 0
    assert "ignoring time offset guess" in caplog.text


def test_shift_time_translates_references() -> None:
    sync = TimeSync()
    sync.update_time_offset(10 * SEC, 1_000 * SEC)
    sync.update_time_offset_guess(0, 500 * SEC)

    sync.shift_time(2.0)

    assert sync.reference_pairs[0].relative_usec == 8 * SEC
    assert sync.reference_pairs[0].epoch_usec == 1_000 * SEC
    assert sync.offset_guess_usec == 502 * SEC
    assert sync.determine_offset() == 992 * SEC


def test_is_absolute_time() -> None:
    assert TimeSync.is_absolute_time(1_600_000_000 * SEC)
    assert not TimeSync.is_absolute_time(10 * SEC)
    assert not TimeSync.is_absolute_time(0)


def test_copy_is_independent() -> None:
    sync = TimeSync()
    sync.update_time_offset(1 * SEC, 100 * SEC)

    dup = sync.copy()
    dup.update_rel_time(2 * SEC)
    dup.update_time_offset(3 * SEC, 200 * SEC)

    assert sync.time == 1.0
    assert len(sync.reference_pairs) == 1
    assert len(dup.reference_pairs) == 2
    assert dup.state is TimeState.VALID


def test_uninitialised_clock_bounds() -> None:
    sync = TimeSync()
    assert sync.time_min == math.inf
    assert sync.time_max == -math.inf
    assert not sync.have_time_update


def test_fractional_reference_is_truncated() -> None:
    sync = TimeSync()

    status = sync.update_time_offset(1_500_000.5, 1_700_000_000_000_000.0)  # type: ignore[arg-type]

    assert status is TimeUpdateStatus.ACCEPTED
    assert sync.time == 1.5
    assert sync.reference_pairs[0].relative_usec == 1_500_000
    assert sync.reference_pairs[0].epoch_usec == 1_700_000_000_000_000


@pytest.mark.parametrize(("relative", "epoch"), [(None, 1_000), (1_000, "soon"), (math.nan, 1_000)])
def test_invalid_reference_changes_nothing(relative: object, epoch: object, caplog: pytest.LogCaptureFixture) -> None:
    sync = TimeSync()
    sync.update_rel_time(2 * SEC)

    with caplog.at_level(logging.WARNING):
        status = sync.update_time_offset(relative, epoch)  # type: ignore[arg-type]

    assert status is TimeUpdateStatus.INVALID
    assert sync.time == 2.0
    assert sync.time_max == 2.0
    assert sync.reference_pairs == []
    assert "ignoring invalid time reference" in caplog.text


def test_non_finite_timestamp_rejected() -> None:
    sync = TimeSync()

    assert sync.update_rel_time(math.nan) is TimeUpdateStatus.INVALID  # type: ignore[arg-type]
    assert sync.state is TimeState.UNINITIALIZED
    assert not sync.have_time_update


def test_guess_accepts_float_times() -> None:
    sync = TimeSync()

    assert sync.update_time_offset_guess(2.7, 1_000.2)  # type: ignore[arg-type]
    assert not sync.update_time_offset_guess("x", 1_000)  # type: ignore[arg-type]

    assert sync.offset_guess_usec == 998
