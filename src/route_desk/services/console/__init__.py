"""Console: application context, events and dispatch."""

from .context import ConsoleContext, create_context
from .dispatcher import Console, build_console
from .events import Notice, RequestKind
from .view import build_view

__all__ = ["Console", "ConsoleContext", "Notice", "RequestKind", "build_console", "build_view", "create_context"]
