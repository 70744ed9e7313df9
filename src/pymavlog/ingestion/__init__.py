"""Ingestion layer.

The decoder collaborator hands already-decoded values to the ``track_*``
operations of :class:`pymavlog.system.MavSystem`. This package holds the
helpers those operations use to sanitize values on the way in.
"""

__all__: list[str] = []
