"""Console request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import OptimizationParams


class OptimizationParamsModel(BaseModel):
    time_limit: int = Field(..., ge=1, description="Solver time limit in seconds.")
    capacity: int = Field(..., ge=1)
    service_time: int = Field(..., ge=0, description="Dwell time per stop in minutes.")
    db_name: str = Field(..., min_length=1)

    def to_domain(self) -> OptimizationParams:
        return OptimizationParams(
            time_limit=self.time_limit,
            capacity=self.capacity,
            service_time=self.service_time,
            db_name=self.db_name,
        )


class LoadStopsRequest(BaseModel):
    db_name: Optional[str] = Field(default=None, description="Dataset to load; defaults to the configured one.")


class RunRequest(BaseModel):
    params: Optional[OptimizationParamsModel] = None


class RemoveStopRequest(BaseModel):
    index: int = Field(..., description="Position of the stop in the working sequence.")


class InsertStopRequest(BaseModel):
    stop_id: str = Field(..., description="Id of a stop currently shown on the map.")
    before_stop_id: str


class LockRequest(BaseModel):
    locked: bool


class VisibilityRequest(BaseModel):
    visible: bool


class PolygonRequest(BaseModel):
    vertices: List[tuple[float, float]] = Field(..., description="(latitude, longitude) vertices.")

    @field_validator("vertices")
    @classmethod
    def validate_vertices(cls, value: List[tuple[float, float]]) -> List[tuple[float, float]]:
        if len(value) < 3:
            raise ValueError("a polygon needs at least 3 vertices")
        return value


class NoticeModel(BaseModel):
    level: str
    message: str
    code: Optional[str] = None


class StopView(BaseModel):
    id: str
    name: str
    latitude: float
    longitude: float
    demand: int
    arrival: str
    depot: bool


class RouteView(BaseModel):
    bus_id: int
    color: str
    route_time_minutes: int
    final_load: int
    locked: bool
    visible: bool
    editing: bool
    stops: List[StopView]


class EditingView(BaseModel):
    bus_id: int
    original_stops: List[StopView]
    working_stops: List[StopView]


class LockedRouteView(BaseModel):
    bus_id: int
    stop_count: int
    final_load: int
    capacity_valid: bool
    message: str


class OverlayView(BaseModel):
    overlay_id: int
    kind: str
    path: List[tuple[float, float]]
    title: Optional[str] = None
    color: Optional[str] = None
    z_index: int = 0
    small: bool = False
    visible: bool = True
    bus_id: Optional[int] = None


class BoundsView(BaseModel):
    south: float
    west: float
    north: float
    east: float


class ControlsView(BaseModel):
    load_stops_enabled: bool
    optimize_enabled: bool
    finalize_visible: bool
    finalize_enabled: bool


class ConsoleView(BaseModel):
    status: str
    params: OptimizationParamsModel
    used_buses: Optional[int] = None
    total_objective_cost: Optional[int] = None
    routes: List[RouteView]
    editing: Optional[EditingView] = None
    locked_routes: List[LockedRouteView]
    controls: ControlsView
    overlays: List[OverlayView]
    bounds: Optional[BoundsView] = None
    polygons: List[List[tuple[float, float]]]
    stops_in_polygon: List[StopView]


class ConsoleResponse(BaseModel):
    notices: List[NoticeModel]
    view: ConsoleView
