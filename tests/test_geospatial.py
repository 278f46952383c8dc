import math

import pytest
from shapely.geometry import Point, Polygon

from route_desk.models.domain import Stop
from route_desk.services.geospatial import (
    collect_inside,
    compute_bounds,
    first_polygon,
    format_minutes_to_time,
    is_inside,
)

SQUARE = [(0, 0), (0, 10), (10, 10), (10, 0)]
HEXAGON = [(2, 0), (1, 1.7), (-1, 1.7), (-2, 0), (-1, -1.7), (1, -1.7)]


def _rigid(point, angle, offset):
    lat, lon = point
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    return (lat * cos_a - lon * sin_a + offset[0], lat * sin_a + lon * cos_a + offset[1])


def test_square_polygon_scenario():
    assert is_inside((5, 5), SQUARE) is True
    assert is_inside((15, 5), SQUARE) is False


def test_ring_is_closed_whether_or_not_first_vertex_repeats():
    closed = SQUARE + [SQUARE[0]]
    for point in [(5, 5), (1, 9), (15, 5), (-1, 5), (5, 11)]:
        assert is_inside(point, closed) == is_inside(point, SQUARE)


def test_degenerate_polygons_contain_nothing():
    assert is_inside((0, 0), []) is False
    assert is_inside((0.5, 0.5), [(0, 0), (1, 1)]) is False
    assert is_inside((0.5, 0.5), [(0, 0), (1, 1), (0, 0)]) is False


@pytest.mark.parametrize("angle", [0.0, 0.3, 1.2, math.pi / 2, 2.5, 4.0])
@pytest.mark.parametrize("offset", [(0.0, 0.0), (37.5, 127.0), (-12.25, 48.0)])
def test_containment_is_invariant_under_rigid_transform(angle, offset):
    polygon = [_rigid(vertex, angle, offset) for vertex in HEXAGON]
    inside_points = [(0, 0), (1.5, 0.2), (-0.5, -1.2)]
    outside_points = [(3, 0), (0, 2.5), (-1.9, 1.5), (1.8, -1.6)]

    for point in inside_points:
        assert is_inside(_rigid(point, angle, offset), polygon) is True
    for point in outside_points:
        assert is_inside(_rigid(point, angle, offset), polygon) is False


def test_concave_polygon_matches_shapely():
    l_shape = [(0, 0), (0, 6), (2, 6), (2, 2), (6, 2), (6, 0)]
    reference = Polygon([(lon, lat) for lat, lon in l_shape])

    for lat_step in range(-1, 8):
        for lon_step in range(-1, 8):
            lat, lon = lat_step + 0.5, lon_step + 0.5
            assert is_inside((lat, lon), l_shape) == reference.contains(Point(lon, lat))


def test_collect_inside_keeps_stop_order():
    stops = [
        Stop(id="S1", name="in-1", latitude=5, longitude=5),
        Stop(id="S2", name="out", latitude=15, longitude=5),
        Stop(id="S3", name="in-2", latitude=1, longitude=9),
    ]
    assert [stop.name for stop in collect_inside(stops, SQUARE)] == ["in-1", "in-2"]


def test_first_polygon_only():
    other = [(20, 20), (20, 30), (30, 30)]
    assert first_polygon([SQUARE, other]) is SQUARE
    assert first_polygon([]) is None


def test_compute_bounds():
    assert compute_bounds([]) is None
    bounds = compute_bounds([(37.5, 127.0), (37.3, 127.2), (37.4, 126.9)])
    assert bounds.south == pytest.approx(37.3)
    assert bounds.north == pytest.approx(37.5)
    assert bounds.west == pytest.approx(126.9)
    assert bounds.east == pytest.approx(127.2)


def test_format_minutes_to_time():
    assert format_minutes_to_time(545) == "09:05"
    assert format_minutes_to_time(0) == "00:00"
    assert format_minutes_to_time(None) == "N/A"
    assert format_minutes_to_time(float("nan")) == "N/A"
