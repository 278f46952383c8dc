import pytest

from route_desk.errors import TransportError
from route_desk.models.domain import BusRoute, LatLng, OptimizationParams, Solution, Stop


def _stop(sid: str, name: str, lat: float, lon: float, demand: int = 0, arrival: int | None = None) -> Stop:
    return Stop(id=sid, name=name, latitude=lat, longitude=lon, demand=demand, arrival_time=arrival)


@pytest.fixture
def stops() -> dict[str, Stop]:
    return {
        "D": _stop("DEPOT_0", "North Garage", 37.50, 127.00, arrival=480),
        "A": _stop("S1", "City Hall", 37.51, 127.01, demand=10, arrival=490),
        "B": _stop("S2", "Library", 37.52, 127.02, demand=15, arrival=500),
        "C": _stop("S3", "Station", 37.53, 127.03, demand=20, arrival=505),
        "F": _stop("S4", "Market", 37.54, 127.04, demand=5, arrival=510),
        "E": _stop("DEPOT_YJ", "Logistics Center", 37.347, 127.1965, arrival=540),
    }


def _path(*stops: Stop) -> list[list[LatLng]]:
    return [
        [LatLng(first.latitude, first.longitude), LatLng(second.latitude, second.longitude)]
        for first, second in zip(stops, stops[1:])
    ]


@pytest.fixture
def solution(stops) -> Solution:
    d, a, b, c, f, e = (stops[key] for key in "DABCFE")
    return Solution(
        used_bus_count=2,
        total_objective_cost=120,
        routes={
            7: BusRoute(bus_id=7, color="#e6194b", stops=[d, a, b, e], route_time_minutes=60, final_load=25, detailed_path=_path(d, a, b, e)),
            8: BusRoute(bus_id=8, color="#3cb44b", stops=[d, c, f, e], route_time_minutes=55, final_load=25, detailed_path=_path(d, c, f, e)),
        },
    )


@pytest.fixture
def params() -> OptimizationParams:
    return OptimizationParams(time_limit=30, capacity=45, service_time=1, db_name="INC4.csv")


class FakeOptimizationClient:
    """Records calls and answers from canned results (an exception instance is raised)."""

    def __init__(self, stops=(), optimize=None, reoptimize=None):
        self.stops = list(stops)
        self.optimize_result = optimize
        self.reoptimize_result = reoptimize
        self.calls: list[tuple] = []

    def _answer(self, result):
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise TransportError("no canned answer")
        return result

    def fetch_all_stops(self, db_name):
        self.calls.append(("stops", db_name))
        return list(self.stops)

    def request_optimize(self, params):
        self.calls.append(("optimize", params))
        return self._answer(self.optimize_result)

    def request_reoptimize(self, overrides, params):
        self.calls.append(("reoptimize", tuple(overrides), params))
        return self._answer(self.reoptimize_result)


@pytest.fixture
def fake_client_factory():
    return FakeOptimizationClient
