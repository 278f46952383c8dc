"""Draw solutions and stop sets onto the map canvas."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import BusRoute, Solution, Stop, is_depot
from ..geospatial import LatLon, compute_bounds
from ..overlays.registry import OverlayRegistry
from .canvas import CanvasOverlay, MapCanvas, OverlayKind

logger = logging.getLogger(__name__)

_MARKER_KINDS = (OverlayKind.STOP_MARKER, OverlayKind.DEPOT_MARKER)


class RenderCoordinator:
    """Turns solutions into canvas overlays, all of them tracked by the registry."""

    def __init__(self, canvas: MapCanvas, registry: OverlayRegistry, depot_prefix: str | None = None) -> None:
        self.canvas = canvas
        self.registry = registry
        self.depot_prefix = depot_prefix
        self._route_polylines: dict[int, list[CanvasOverlay]] = {}

    def clear(self) -> None:
        self.registry.clear_all()
        self._route_polylines = {}

    def _is_depot(self, stop: Stop) -> bool:
        return is_depot(stop, self.depot_prefix)

    def draw_stops(self, stops: Sequence[Stop]) -> None:
        """Draw one marker per stop, depots with the depot marker, and fit the view."""
        for stop in stops:
            overlay = self.canvas.add_marker(
                (stop.latitude, stop.longitude),
                title=stop.name,
                depot=self._is_depot(stop),
                stop=stop,
            )
            self.registry.register(overlay)
        self._fit([(stop.latitude, stop.longitude) for stop in stops])

    def _draw_route(self, route: BusRoute, route_index: int) -> None:
        last_index = len(route.stops) - 1
        for index, stop in enumerate(route.stops):
            position = (stop.latitude, stop.longitude)
            depot = self._is_depot(stop)
            if index == 0 and not depot:
                # Routes that start at a pickup get a bus number label instead of a marker.
                overlay = self.canvas.add_label(position, label=str(route.bus_id), stop=stop, bus_id=route.bus_id)
            elif index == last_index and depot:
                overlay = self.canvas.add_marker(position, title=stop.name, depot=True, stop=stop, bus_id=route.bus_id)
            elif not depot:
                overlay = self.canvas.add_marker(position, title=stop.name, small=True, stop=stop, bus_id=route.bus_id)
            else:
                continue
            self.registry.register(overlay)

        polylines: list[CanvasOverlay] = []
        for segment in route.detailed_path:
            if not segment:
                continue
            path = [(point.lat, point.lng) for point in segment]
            polyline = self.canvas.add_polyline(path, color=route.color, z_index=route_index, bus_id=route.bus_id)
            self.registry.register(polyline)
            polylines.append(polyline)
        self._route_polylines[route.bus_id] = polylines

    def draw_solution(self, solution: Solution) -> None:
        points: list[LatLon] = []
        for route_index, route in enumerate(solution.routes.values()):
            if not route.stops:
                continue
            self._draw_route(route, route_index)
            points.extend((stop.latitude, stop.longitude) for stop in route.stops)
        self._fit(points)
        logger.info(f"Drew {len(solution.routes)} routes ({len(self.registry)} overlays)")

    def draw_polygon(self, vertices: Sequence[LatLon]) -> CanvasOverlay:
        # User-drawn shapes outlive redraws, so they are not tracked by the registry.
        return self.canvas.add_polygon(vertices)

    def marker_stops(self) -> list[Stop]:
        """Stops drawn as markers; bus number labels are left out."""
        return [
            overlay.stop
            for overlay in self.registry
            if overlay.stop is not None and getattr(overlay, "kind", None) in _MARKER_KINDS
        ]

    def set_route_visible(self, bus_id: int, visible: bool) -> None:
        for polyline in self._route_polylines.get(bus_id, []):
            polyline.set_visible(visible)

    def _fit(self, points: list[LatLon]) -> None:
        bounds = compute_bounds(points)
        if bounds is not None:
            self.canvas.fit_bounds(bounds)
