"""Exceptions raised by the live hedge core."""


class LiveHedgeError(Exception):
    """Base class for errors raised inside the core."""

    pass


class ZoneTableError(LiveHedgeError):
    """Raised when a bulk shot-zone table cannot be indexed."""

    pass
