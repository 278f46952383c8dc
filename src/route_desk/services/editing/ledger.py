"""Route lock ledger: user overrides honored by re-optimization."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...models.domain import LockEntry, Stop

logger = logging.getLogger(__name__)


class RouteLockLedger:
    """Maps a bus id to the stop sequence the optimizer must keep verbatim.

    Entries keep the order of their first ``set``; re-locking a bus replaces
    its stops in place.
    """

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Stop, ...]] = {}

    def set(self, bus_id: int, stops: Iterable[Stop]) -> None:
        self._entries[bus_id] = tuple(stops)
        logger.info(f"Locked bus {bus_id} with {len(self._entries[bus_id])} stops")

    def remove(self, bus_id: int) -> None:
        if self._entries.pop(bus_id, None) is not None:
            logger.info(f"Unlocked bus {bus_id}")

    def get(self, bus_id: int) -> Optional[tuple[Stop, ...]]:
        return self._entries.get(bus_id)

    def has(self, bus_id: int) -> bool:
        return bus_id in self._entries

    def is_empty(self) -> bool:
        return not self._entries

    def clear(self) -> None:
        self._entries.clear()

    def to_override_list(self) -> list[LockEntry]:
        return [LockEntry(bus_id=bus_id, stops=stops) for bus_id, stops in self._entries.items()]

    def __contains__(self, bus_id: object) -> bool:
        return bus_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
