"""Geospatial helper functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from shapely.geometry import MultiPoint

from ..models.domain import Stop

# (latitude, longitude)
LatLon = tuple[float, float]


@dataclass(slots=True, frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float


def _closed_ring(polygon: Sequence[LatLon]) -> list[LatLon]:
    ring = [(float(lat), float(lon)) for lat, lon in polygon]
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring.pop()
    return ring


def is_inside(point: LatLon, polygon: Sequence[LatLon]) -> bool:
    """Return True if the (lat, lon) point is inside the polygon given as (lat, lon) vertices.

    Crossing-number test: a ray is cast from the point towards increasing
    longitude and every polygon edge straddling the point's latitude to the
    east of the point counts as one crossing. An odd count means inside.
    The ring is closed implicitly, whether or not the last vertex repeats the first.
    """

    ring = _closed_ring(polygon)
    if len(ring) < 3:
        return False

    lat, lon = point
    crossings = 0
    for index, (lat1, lon1) in enumerate(ring):
        lat2, lon2 = ring[(index + 1) % len(ring)]
        if (lat1 > lat) != (lat2 > lat):
            edge_lon = (lon2 - lon1) * (lat - lat1) / (lat2 - lat1) + lon1
            if lon < edge_lon:
                crossings += 1
    return crossings % 2 == 1


def collect_inside(stops: Iterable[Stop], polygon: Sequence[LatLon]) -> list[Stop]:
    """Return the stops that fall inside the polygon, in their original order."""

    return [stop for stop in stops if is_inside((stop.latitude, stop.longitude), polygon)]


def first_polygon(polygons: Sequence[Sequence[LatLon]]) -> Optional[Sequence[LatLon]]:
    """Pick the polygon used for stop listing.

    Only the first drawn polygon is considered when several exist; the
    others are kept on the map but ignored for containment.
    """

    return polygons[0] if polygons else None


def compute_bounds(points: Iterable[LatLon]) -> Optional[Bounds]:
    """Bounding box over (lat, lon) points, or None when there are no points."""

    coords = [(lon, lat) for lat, lon in points]
    if not coords:
        return None
    west, south, east, north = MultiPoint(coords).bounds
    return Bounds(south=south, west=west, north=north, east=east)


def format_minutes_to_time(total_minutes: Optional[float]) -> str:
    """Render minutes after midnight as HH:MM."""

    if not isinstance(total_minutes, (int, float)) or isinstance(total_minutes, bool):
        return "N/A"
    if total_minutes != total_minutes:  # NaN
        return "N/A"
    minutes = int(total_minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
