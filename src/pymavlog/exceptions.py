"""Custom exception hierarchy for pymavlog.

Public :class:`pymavlog.system.MavSystem` operations report failures through
return values and the per-system diagnostic logger. The exceptions below are
raised for programming errors (bad configuration, unusable paths) and are
used internally where a status needs to unwind a few frames.
"""

from __future__ import annotations


class MavlogError(Exception):
    """Base exception for all pymavlog errors."""


class MavlogConfigError(MavlogError):
    """Invalid configuration value or environment variable."""


class MavlogPathError(MavlogError, ValueError):
    """A path that cannot name a data unit."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class MergeTypeMismatchError(MavlogError):
    """Two data units at the same path have incompatible representations.

    Raised inside :meth:`pymavlog.data.DataUnit.merge_in` and converted to a
    ``False`` return there, so the merge engine can skip the unit and carry on.
    """

    def __init__(
        self,
        message: str,
        *,
        existing: str = "",
        incoming: str = "",
    ) -> None:
        self.existing = existing
        self.incoming = incoming
        super().__init__(message)
