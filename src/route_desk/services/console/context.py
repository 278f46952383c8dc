"""Application context shared by every console handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ...config import settings
from ...models.domain import BusRoute, OptimizationParams, Solution, Stop
from ..editing.ledger import RouteLockLedger
from ..editing.session import RouteEditSession
from ..geospatial import LatLon
from ..overlays.registry import OverlayRegistry
from ..rendering.canvas import CanvasOverlay, InMemoryCanvas
from ..rendering.coordinator import RenderCoordinator
from .events import RequestKind


@dataclass
class ConsoleContext:
    canvas: InMemoryCanvas
    registry: OverlayRegistry
    renderer: RenderCoordinator
    ledger: RouteLockLedger
    session: RouteEditSession
    params: OptimizationParams
    depot_prefix: str
    solution: Optional[Solution] = None
    baseline_stops: list[Stop] = field(default_factory=list)
    displayed_stops: dict[int, tuple[Stop, ...]] = field(default_factory=dict)
    visible: dict[int, bool] = field(default_factory=dict)
    polygons: list[list[LatLon]] = field(default_factory=list)
    polygon_overlays: list[CanvasOverlay] = field(default_factory=list)
    stops_in_polygon: list[Stop] = field(default_factory=list)
    in_flight: set[RequestKind] = field(default_factory=set)
    generation: int = 0
    status: str = "Load stops to begin."

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def is_stale(self, generation: int) -> bool:
        return generation < self.generation

    def route(self, bus_id: int) -> Optional[BusRoute]:
        if self.solution is None:
            return None
        return self.solution.routes.get(bus_id)

    def find_stop(self, stop_id: str) -> Optional[Stop]:
        """First stop with ``stop_id`` on the map, falling back to the baseline set."""
        for stop in self.registry.stops():
            if stop.id == stop_id:
                return stop
        for stop in self.baseline_stops:
            if stop.id == stop_id:
                return stop
        return None


def create_context(
    canvas: InMemoryCanvas | None = None,
    params: OptimizationParams | None = None,
    depot_prefix: str | None = None,
) -> ConsoleContext:
    prefix = depot_prefix or settings.depot_prefix
    canvas = canvas or InMemoryCanvas()
    registry = OverlayRegistry()
    ledger = RouteLockLedger()
    return ConsoleContext(
        canvas=canvas,
        registry=registry,
        renderer=RenderCoordinator(canvas, registry, depot_prefix=prefix),
        ledger=ledger,
        session=RouteEditSession(ledger, depot_prefix=prefix),
        params=params or OptimizationParams.from_settings(),
        depot_prefix=prefix,
    )
