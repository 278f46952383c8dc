"""Domain models for stops, routes and optimization results."""

from dataclasses import dataclass, field
from typing import Optional

from ..config import settings


@dataclass(slots=True, frozen=True)
class Stop:
    """A pickup point (or depot) as returned by the optimization service."""

    id: str
    name: str
    latitude: float
    longitude: float
    demand: int = 0
    arrival_time: Optional[int] = None
    current_load: Optional[int] = None


@dataclass(slots=True, frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(slots=True)
class BusRoute:
    """One bus' stop sequence with the road geometry between consecutive stops."""

    bus_id: int
    color: str
    stops: list[Stop]
    route_time_minutes: int = 0
    final_load: int = 0
    detailed_path: list[list[LatLng]] = field(default_factory=list)


@dataclass(slots=True)
class Solution:
    used_bus_count: int
    total_objective_cost: int
    routes: dict[int, BusRoute]


@dataclass(slots=True, frozen=True)
class LockEntry:
    bus_id: int
    stops: tuple[Stop, ...]


@dataclass(slots=True, frozen=True)
class OptimizationParams:
    time_limit: int
    capacity: int
    service_time: int
    db_name: str

    @classmethod
    def from_settings(cls) -> "OptimizationParams":
        return cls(
            time_limit=settings.time_limit,
            capacity=settings.capacity,
            service_time=settings.service_time,
            db_name=settings.db_name,
        )


def is_depot(stop: Stop, prefix: str | None = None) -> bool:
    """Return True if the stop id carries the reserved depot prefix."""

    return stop.id.startswith(prefix or settings.depot_prefix)
