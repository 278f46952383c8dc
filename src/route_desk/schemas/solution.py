"""Wire models exchanged with the optimization service."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.domain import BusRoute, LatLng, LockEntry, OptimizationParams, Solution, Stop


class StopModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    demand: int = 0
    lat: float
    lon: float
    arrival_time: Optional[int] = Field(default=None, alias="arrivalTime")
    current_load: Optional[int] = Field(default=None, alias="currentLoad")

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        return cls(
            id=stop.id,
            name=stop.name,
            demand=stop.demand,
            lat=stop.latitude,
            lon=stop.longitude,
            arrival_time=stop.arrival_time,
            current_load=stop.current_load,
        )

    def to_domain(self) -> Stop:
        return Stop(
            id=self.id,
            name=self.name,
            latitude=self.lat,
            longitude=self.lon,
            demand=self.demand,
            arrival_time=self.arrival_time,
            current_load=self.current_load,
        )


class LatLngModel(BaseModel):
    lat: float
    lng: float


class BusRouteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bus_id: int = Field(..., alias="busId")
    route: List[StopModel] = Field(default_factory=list)
    route_time: int = Field(default=0, alias="routeTime")
    final_load: int = Field(default=0, alias="finalLoad")
    color: str = "#3366cc"
    detailed_path: List[List[LatLngModel]] = Field(default_factory=list, alias="detailedPath")

    @field_validator("detailed_path", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        # Older service builds omit the geometry or send null segments.
        if value is None:
            return []
        return [segment or [] for segment in value]

    def to_domain(self) -> BusRoute:
        return BusRoute(
            bus_id=self.bus_id,
            color=self.color,
            stops=[stop.to_domain() for stop in self.route],
            route_time_minutes=self.route_time,
            final_load=self.final_load,
            detailed_path=[[LatLng(point.lat, point.lng) for point in segment] for segment in self.detailed_path],
        )


class RouteSolutionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    used_buses: int = Field(default=0, alias="usedBuses")
    total_objective_time: int = Field(default=0, alias="totalObjectiveTime")
    bus_routes: Optional[List[BusRouteModel]] = Field(default=None, alias="busRoutes")

    @field_validator("bus_routes")
    @classmethod
    def _unique_bus_ids(cls, value: Optional[List[BusRouteModel]]) -> Optional[List[BusRouteModel]]:
        if value is None:
            return value
        seen: set[int] = set()
        for route in value:
            if route.bus_id in seen:
                raise ValueError(f"duplicate busId {route.bus_id} in solution")
            seen.add(route.bus_id)
        return value

    def to_domain(self) -> Solution:
        routes = {route.bus_id: route.to_domain() for route in self.bus_routes or []}
        return Solution(
            used_bus_count=self.used_buses,
            total_objective_cost=self.total_objective_time,
            routes=routes,
        )


class ModifiedRouteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bus_id: int = Field(..., alias="busId")
    new_route: List[StopModel] = Field(..., alias="newRoute")

    @classmethod
    def from_domain(cls, entry: LockEntry) -> "ModifiedRouteModel":
        return cls(bus_id=entry.bus_id, new_route=[StopModel.from_domain(stop) for stop in entry.stops])


class RouteModificationRequest(BaseModel):
    """Body of ``POST /api/re-optimize``.

    The service reads ``params`` into a string map, so every value is sent as a string.
    """

    modifications: List[ModifiedRouteModel]
    params: dict[str, str]

    @classmethod
    def build(cls, overrides: List[LockEntry], params: OptimizationParams) -> "RouteModificationRequest":
        return cls(
            modifications=[ModifiedRouteModel.from_domain(entry) for entry in overrides],
            params={key: str(value) for key, value in params_to_query(params).items()},
        )


def params_to_query(params: OptimizationParams) -> dict[str, int | str]:
    return {
        "timeLimit": params.time_limit,
        "capacity": params.capacity,
        "serviceTime": params.service_time,
        "dbName": params.db_name,
    }
