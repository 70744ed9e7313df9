from __future__ import annotations

import math

import pytest

from pymavlog.ingestion.normalize import angle360, in_range, safe_float, safe_int, safe_str, to_enum
from pymavlog.models import SystemStatus


@pytest.mark.parametrize("value", [None, True, "nan", float("inf"), "abc", [1.0]])
def test_safe_float_rejects_non_finite_and_non_numeric(value: object) -> None:
    assert safe_float(value) is None


def test_safe_float_parses_numbers_and_strings() -> None:
    assert safe_float("1.5") == 1.5
    assert safe_float(3) == 3.0


def test_safe_int_truncates() -> None:
    assert safe_int("3.7") == 3
    assert safe_int(math.nan) is None


def test_safe_str_stops_at_nul() -> None:
    assert safe_str(b"PreArm: check\x00garbage") == "PreArm: check"
    assert safe_str("") is None
    assert safe_str(None) is None


def test_in_range_is_inclusive() -> None:
    assert in_range(360.0, 0.0, 360.0) == 360.0
    assert in_range(360.5, 0.0, 360.0) is None
    assert in_range(None, 0.0, 1.0) is None


def test_to_enum_with_default() -> None:
    assert to_enum(SystemStatus, 0) is SystemStatus.UNINIT
    assert to_enum(SystemStatus, "x") is None
    assert to_enum(SystemStatus, "x", SystemStatus.UNKNOWN) is SystemStatus.UNKNOWN


@pytest.mark.parametrize(
    ("value", "expected"),
    [(-90.0, 270.0), (720.0, 0.0), (360.0, 0.0), (45.0, 45.0), (-450.0, 270.0)],
)
def test_angle360_wraps(value: float, expected: float) -> None:
    assert angle360(value) == pytest.approx(expected)
