"""Map canvas abstraction.

The browser owns the real map SDK. The console only needs to know what is
drawn, where, and whether it is attached or visible, which is what
``InMemoryCanvas`` records and what the view snapshot reports back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Optional, Protocol, Sequence

from ...models.domain import Stop
from ..geospatial import Bounds, LatLon


class OverlayKind(str, Enum):
    STOP_MARKER = "stop_marker"
    DEPOT_MARKER = "depot_marker"
    ROUTE_LABEL = "route_label"
    POLYLINE = "polyline"
    POLYGON = "polygon"


@dataclass(eq=False)
class CanvasOverlay:
    overlay_id: int
    kind: OverlayKind
    path: list[LatLon]
    title: Optional[str] = None
    color: Optional[str] = None
    z_index: int = 0
    small: bool = False
    stop: Optional[Stop] = None
    bus_id: Optional[int] = None
    attached: bool = True
    visible: bool = True

    def detach(self) -> None:
        self.attached = False

    def set_visible(self, visible: bool) -> None:
        self.visible = visible


class MapCanvas(Protocol):
    def add_marker(
        self,
        position: LatLon,
        *,
        title: str,
        depot: bool = False,
        small: bool = False,
        stop: Optional[Stop] = None,
        bus_id: Optional[int] = None,
    ) -> CanvasOverlay:
        ...

    def add_label(self, position: LatLon, *, label: str, stop: Optional[Stop] = None, bus_id: Optional[int] = None) -> CanvasOverlay:
        ...

    def add_polyline(self, path: Sequence[LatLon], *, color: str, z_index: int = 0, bus_id: Optional[int] = None) -> CanvasOverlay:
        ...

    def add_polygon(self, vertices: Sequence[LatLon]) -> CanvasOverlay:
        ...

    def fit_bounds(self, bounds: Bounds) -> None:
        ...


@dataclass
class InMemoryCanvas:
    """Canvas that keeps drawn overlays in memory."""

    overlays: list[CanvasOverlay] = field(default_factory=list)
    bounds: Optional[Bounds] = None
    _ids: count = field(default_factory=lambda: count(1), repr=False)

    def _add(self, overlay: CanvasOverlay) -> CanvasOverlay:
        self.overlays.append(overlay)
        return overlay

    def add_marker(
        self,
        position: LatLon,
        *,
        title: str,
        depot: bool = False,
        small: bool = False,
        stop: Optional[Stop] = None,
        bus_id: Optional[int] = None,
    ) -> CanvasOverlay:
        kind = OverlayKind.DEPOT_MARKER if depot else OverlayKind.STOP_MARKER
        return self._add(
            CanvasOverlay(next(self._ids), kind, [position], title=title, small=small, stop=stop, bus_id=bus_id)
        )

    def add_label(self, position: LatLon, *, label: str, stop: Optional[Stop] = None, bus_id: Optional[int] = None) -> CanvasOverlay:
        return self._add(CanvasOverlay(next(self._ids), OverlayKind.ROUTE_LABEL, [position], title=label, stop=stop, bus_id=bus_id))

    def add_polyline(self, path: Sequence[LatLon], *, color: str, z_index: int = 0, bus_id: Optional[int] = None) -> CanvasOverlay:
        return self._add(
            CanvasOverlay(next(self._ids), OverlayKind.POLYLINE, list(path), color=color, z_index=z_index, bus_id=bus_id)
        )

    def add_polygon(self, vertices: Sequence[LatLon]) -> CanvasOverlay:
        return self._add(CanvasOverlay(next(self._ids), OverlayKind.POLYGON, list(vertices)))

    def fit_bounds(self, bounds: Bounds) -> None:
        self.bounds = bounds

    def attached(self) -> list[CanvasOverlay]:
        # Detached overlays are dropped here; the registry already forgot them.
        self.overlays = [overlay for overlay in self.overlays if overlay.attached]
        return list(self.overlays)
