"""Error taxonomy for the route desk.

Every ``RouteDeskError`` is recoverable: the console reports it to the user
and leaves its state as it was before the rejected operation.
``SessionNotActive`` sits outside that hierarchy: calling a
session method without an active session is a bug in the caller.
"""

from __future__ import annotations


class RouteDeskError(Exception):
    """Base class for failures reported to the dispatcher without crashing."""


class TransportError(RouteDeskError):
    """The optimization service could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LogicalNoSolution(RouteDeskError):
    """The service answered well-formed but without any routes."""


class EditConflict(RouteDeskError):
    """An edit session is already active."""


class InvalidOperation(RouteDeskError):
    """Depot removal or an out-of-range index during editing."""


class AnchorNotFound(RouteDeskError):
    """No stop with the requested anchor id exists in the working stops."""


class EmptyLedger(RouteDeskError):
    """Finalize was requested with no locked routes."""


class RequestInFlight(RouteDeskError):
    """A request of the same kind has not resolved yet."""


class SessionNotActive(RuntimeError):
    """A session method other than start was called while idle."""
