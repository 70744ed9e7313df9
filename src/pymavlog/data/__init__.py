"""Data units: the leaves of a system's hierarchy store."""

from pymavlog.data._base import DataKind, DataUnit
from pymavlog.data._timed import TimedUnit
from pymavlog.data.event import Event
from pymavlog.data.parameter import Parameter
from pymavlog.data.timeseries import Timeseries

__all__ = [
    "DataKind",
    "DataUnit",
    "Event",
    "Parameter",
    "TimedUnit",
    "Timeseries",
]
