"""Exclusive editing transaction over one route's stop sequence."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ...errors import AnchorNotFound, EditConflict, InvalidOperation, SessionNotActive
from ...models.domain import Stop, is_depot
from .ledger import RouteLockLedger

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EditSession:
    bus_id: int
    original_stops: tuple[Stop, ...]
    working_stops: list[Stop] = field(default_factory=list)


class RouteEditSession:
    """Idle / Editing(bus_id) state machine.

    Only one route can be edited at a time. Commit writes the working copy
    into the ledger; cancel throws it away.
    """

    def __init__(self, ledger: RouteLockLedger, depot_prefix: str | None = None) -> None:
        self.ledger = ledger
        self.depot_prefix = depot_prefix
        self._active: Optional[EditSession] = None

    @property
    def is_editing(self) -> bool:
        return self._active is not None

    @property
    def bus_id(self) -> Optional[int]:
        return self._active.bus_id if self._active else None

    @property
    def working_stops(self) -> tuple[Stop, ...]:
        return tuple(self._require().working_stops)

    @property
    def original_stops(self) -> tuple[Stop, ...]:
        return self._require().original_stops

    def _require(self) -> EditSession:
        if self._active is None:
            raise SessionNotActive("No route is being edited.")
        return self._active

    def start_edit(self, bus_id: int, stops: Iterable[Stop]) -> None:
        if self._active is not None:
            raise EditConflict(
                f"Bus {self._active.bus_id} is already being edited. Save or cancel it first."
            )
        snapshot = tuple(stops)
        self._active = EditSession(bus_id=bus_id, original_stops=snapshot, working_stops=list(snapshot))
        logger.info(f"Started editing bus {bus_id} ({len(snapshot)} stops)")

    def remove_stop(self, index: int) -> Stop:
        session = self._require()
        if index < 0 or index >= len(session.working_stops):
            raise InvalidOperation(
                f"Stop index {index} is out of range for bus {session.bus_id} "
                f"({len(session.working_stops)} stops)."
            )
        target = session.working_stops[index]
        if is_depot(target, self.depot_prefix):
            raise InvalidOperation(f"Depot stop '{target.name}' cannot be removed.")
        del session.working_stops[index]
        return target

    def insert_stop(self, stop: Stop, before_stop_id: str) -> int:
        """Insert ``stop`` right before the first working stop with ``before_stop_id``."""
        session = self._require()
        for position, candidate in enumerate(session.working_stops):
            if candidate.id == before_stop_id:
                session.working_stops.insert(position, stop)
                return position
        raise AnchorNotFound(f"Stop '{before_stop_id}' is not on bus {session.bus_id}'s route.")

    def commit(self) -> tuple[Stop, ...]:
        session = self._require()
        finalized = tuple(session.working_stops)
        self._active = None
        self.ledger.set(session.bus_id, finalized)
        logger.info(f"Committed edit of bus {session.bus_id}")
        return finalized

    def cancel(self) -> tuple[Stop, ...]:
        session = self._require()
        self._active = None
        logger.info(f"Cancelled edit of bus {session.bus_id}")
        return session.original_stops
