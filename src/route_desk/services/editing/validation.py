"""Load and capacity checks for hand-edited routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ...models.domain import Stop, is_depot


@dataclass(slots=True, frozen=True)
class RouteValidation:
    bus_id: int
    final_load: int
    capacity_valid: bool
    message: str


def validate_route(bus_id: int, stops: Sequence[Stop], capacity: int, depot_prefix: str | None = None) -> RouteValidation:
    """Accumulate boarding demand along the route and compare it to the bus capacity.

    Depots carry no passengers and are skipped. The route is flagged as soon
    as the running load exceeds capacity at any stop.
    """

    load = 0
    capacity_valid = True
    for stop in stops:
        if is_depot(stop, depot_prefix):
            continue
        load += stop.demand
        if load > capacity:
            capacity_valid = False

    message = "ok" if capacity_valid else f"exceeds capacity of {capacity} passengers (load {load})"
    return RouteValidation(bus_id=bus_id, final_load=load, capacity_valid=capacity_valid, message=message)
