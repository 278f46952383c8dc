"""Single-threaded event dispatch over the console context."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ...config import settings
from ...errors import RouteDeskError, TransportError
from ...schemas.console import ConsoleView
from ..optimization.client import OptimizationClient
from .context import ConsoleContext, create_context
from .events import (
    Effect,
    Event,
    FetchSolution,
    FetchStops,
    Notice,
    Reaction,
    RequestFailed,
    RequestKind,
    SolutionReceived,
    StopsLoaded,
)
from .handlers import handle
from .view import build_view

logger = logging.getLogger(__name__)


class Console:
    """Runs events through their handlers one at a time.

    The lock makes every handler run as if on a single thread. It is released
    while a declared network effect runs, so a long optimization does not
    block other actions; the handlers' in-flight flags and request
    generations keep overlapping requests apart.
    """

    def __init__(self, context: ConsoleContext, client: Optional[OptimizationClient] = None) -> None:
        self.context = context
        self.client = client
        self._lock = threading.RLock()

    def dispatch(self, event: Event) -> list[Notice]:
        with self._lock:
            reaction = self._apply(event)
        notices = list(reaction.notices)
        for effect in reaction.effects:
            notices.extend(self.dispatch(self._execute(effect)))
        return notices

    def snapshot(self) -> ConsoleView:
        with self._lock:
            return build_view(self.context)

    @contextmanager
    def exclusive(self) -> Iterator[ConsoleContext]:
        """Hold the dispatcher lock across a state check and the dispatch that depends on it."""
        with self._lock:
            yield self.context

    def _apply(self, event: Event) -> Reaction:
        try:
            return handle(self.context, event)
        except RouteDeskError as exc:
            logger.warning(f"{type(event).__name__} rejected: {exc}")
            return Reaction(notices=[Notice.error(str(exc), code=type(exc).__name__)])

    def _execute(self, effect: Effect) -> Event:
        if self.client is None:
            return RequestFailed(
                kind=effect.kind,
                generation=effect.generation,
                error=TransportError("Optimization service is not configured."),
            )
        try:
            if isinstance(effect, FetchStops):
                stops = self.client.fetch_all_stops(effect.db_name)
                return StopsLoaded(generation=effect.generation, stops=tuple(stops))
            if isinstance(effect, FetchSolution):
                if effect.kind is RequestKind.REOPTIMIZE:
                    solution = self.client.request_reoptimize(effect.overrides, effect.params)
                else:
                    solution = self.client.request_optimize(effect.params)
                return SolutionReceived(kind=effect.kind, generation=effect.generation, solution=solution)
        except RouteDeskError as exc:
            return RequestFailed(kind=effect.kind, generation=effect.generation, error=exc)
        except Exception:
            logger.exception(f"{effect.kind.value} request crashed")
            with self._lock:
                self.context.in_flight.discard(effect.kind)
            raise
        raise TypeError(f"Unknown effect {type(effect).__name__}")


def build_console() -> Console:
    client = None
    if settings.optimizer_base_url:
        client = OptimizationClient()
    else:
        logger.warning("ROUTE_DESK_OPTIMIZER_BASE_URL is not set; optimization requests will fail.")
    return Console(create_context(), client)
