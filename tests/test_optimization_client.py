import json

import httpx
import pytest

from route_desk.errors import LogicalNoSolution, TransportError
from route_desk.models.domain import LockEntry
from route_desk.services.optimization.client import OptimizationClient

BASE_URL = "http://optimizer.test"

SOLUTION_PAYLOAD = {
    "usedBuses": 1,
    "totalObjectiveTime": 77,
    "busRoutes": [
        {
            "busId": 1,
            "color": "#e6194b",
            "routeTime": 60,
            "finalLoad": 12,
            "route": [
                {"id": "DEPOT_0", "name": "North Garage", "demand": 0, "lat": 37.5, "lon": 127.0, "arrivalTime": 480, "currentLoad": 0},
                {"id": "S1", "name": "City Hall", "demand": 12, "lat": 37.51, "lon": 127.01, "arrivalTime": 500, "currentLoad": 12},
                {"id": "DEPOT_YJ", "name": "Logistics Center", "demand": 0, "lat": 37.347, "lon": 127.1965, "arrivalTime": 540, "currentLoad": 12},
            ],
            "detailedPath": [
                [{"lat": 37.5, "lng": 127.0}, {"lat": 37.51, "lng": 127.01}],
                None,
            ],
        }
    ],
}


def _client(handler) -> OptimizationClient:
    http_client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return OptimizationClient(base_url=BASE_URL, client=http_client)


def test_request_optimize_sends_query_and_parses_solution(params):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=SOLUTION_PAYLOAD)

    solution = _client(handler).request_optimize(params)

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/optimize-route"
    assert dict(request.url.params) == {"timeLimit": "30", "capacity": "45", "serviceTime": "1", "dbName": "INC4.csv"}

    assert solution.used_bus_count == 1
    assert solution.total_objective_cost == 77
    route = solution.routes[1]
    assert [stop.id for stop in route.stops] == ["DEPOT_0", "S1", "DEPOT_YJ"]
    assert route.stops[1].arrival_time == 500
    assert route.detailed_path[0][1].lng == pytest.approx(127.01)
    assert route.detailed_path[1] == []


@pytest.mark.parametrize("body", [{"usedBuses": 0, "busRoutes": []}, {"usedBuses": 0}, None])
def test_empty_result_is_a_logical_failure(params, body):
    content = json.dumps(body).encode()
    client = _client(lambda request: httpx.Response(200, content=content, headers={"content-type": "application/json"}))

    with pytest.raises(LogicalNoSolution):
        client.request_optimize(params)


def test_non_2xx_is_a_transport_failure_without_retry(params):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500, json=None)

    with pytest.raises(TransportError) as excinfo:
        _client(handler).request_optimize(params)

    assert excinfo.value.status_code == 500
    assert len(calls) == 1


def test_network_error_is_a_transport_failure(params):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        _client(handler).request_optimize(params)


def test_unreadable_body_is_a_transport_failure(params):
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(TransportError):
        client.request_optimize(params)


def test_duplicate_bus_ids_are_rejected(params):
    payload = dict(SOLUTION_PAYLOAD, busRoutes=SOLUTION_PAYLOAD["busRoutes"] * 2)
    client = _client(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(TransportError):
        client.request_optimize(params)


def test_request_reoptimize_posts_overrides_in_order(params, stops):
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        assert request.method == "POST"
        assert request.url.path == "/api/re-optimize"
        return httpx.Response(200, json=SOLUTION_PAYLOAD)

    d, a, b, e = (stops[key] for key in "DABE")
    overrides = [LockEntry(bus_id=8, stops=(d, b, e)), LockEntry(bus_id=7, stops=(d, a, e))]

    _client(handler).request_reoptimize(overrides, params)

    body = bodies[0]
    assert [item["busId"] for item in body["modifications"]] == [8, 7]
    assert [stop["id"] for stop in body["modifications"][0]["newRoute"]] == ["DEPOT_0", "S2", "DEPOT_YJ"]
    first_stop = body["modifications"][0]["newRoute"][0]
    assert first_stop["lat"] == pytest.approx(37.5)
    assert first_stop["arrivalTime"] == 480
    assert body["params"] == {"timeLimit": "30", "capacity": "45", "serviceTime": "1", "dbName": "INC4.csv"}


def test_fetch_all_stops(params):
    def handler(request):
        assert request.url.path == "/api/all-stops"
        assert request.url.params["dbName"] == "INC4.csv"
        return httpx.Response(
            200,
            json=[
                {"id": "DEPOT_0", "name": "North Garage", "demand": 0, "lat": 37.5, "lon": 127.0},
                {"id": "S1", "name": "City Hall", "demand": 12, "lat": 37.51, "lon": 127.01},
            ],
        )

    stops = _client(handler).fetch_all_stops("INC4.csv")

    assert [stop.name for stop in stops] == ["North Garage", "City Hall"]
    assert stops[1].demand == 12
    assert stops[1].arrival_time is None


def test_missing_base_url_is_a_configuration_error(monkeypatch):
    from route_desk.services.optimization import client as client_module

    monkeypatch.setattr(client_module.settings, "optimizer_base_url", None)
    with pytest.raises(ValueError):
        OptimizationClient()
