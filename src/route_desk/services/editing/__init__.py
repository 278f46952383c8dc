"""Route editing and locking."""

from .ledger import RouteLockLedger
from .session import EditSession, RouteEditSession
from .validation import RouteValidation, validate_route

__all__ = ["RouteLockLedger", "EditSession", "RouteEditSession", "RouteValidation", "validate_route"]
