"""Internal building blocks of :class:`pymavlog.system.MavSystem`."""

__all__: list[str] = []
