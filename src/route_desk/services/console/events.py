"""User actions, request completions and the side effects handlers may declare."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ...errors import RouteDeskError
from ...models.domain import LockEntry, OptimizationParams, Solution, Stop
from ..geospatial import LatLon


class RequestKind(str, Enum):
    STOPS = "stops"
    OPTIMIZE = "optimize"
    REOPTIMIZE = "reoptimize"


@dataclass(frozen=True)
class LoadStops:
    db_name: Optional[str] = None


@dataclass(frozen=True)
class StopsLoaded:
    generation: int
    stops: tuple[Stop, ...]


@dataclass(frozen=True)
class OptimizeRequested:
    params: Optional[OptimizationParams] = None


@dataclass(frozen=True)
class FinalizeRequested:
    params: Optional[OptimizationParams] = None


@dataclass(frozen=True)
class SolutionReceived:
    kind: RequestKind
    generation: int
    solution: Solution


@dataclass(frozen=True)
class RequestFailed:
    kind: RequestKind
    generation: int
    error: RouteDeskError


@dataclass(frozen=True)
class StartEdit:
    bus_id: int


@dataclass(frozen=True)
class RemoveStop:
    index: int


@dataclass(frozen=True)
class InsertStop:
    stop: Stop
    before_stop_id: str


@dataclass(frozen=True)
class CommitEdit:
    pass


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class ToggleLock:
    bus_id: int
    locked: bool


@dataclass(frozen=True)
class ToggleRouteVisibility:
    bus_id: int
    visible: bool


@dataclass(frozen=True)
class ToggleAllRoutes:
    visible: bool


@dataclass(frozen=True)
class PolygonDrawn:
    vertices: tuple[LatLon, ...]


@dataclass(frozen=True)
class PolygonRemoved:
    index: int


@dataclass(frozen=True)
class ClearPolygons:
    pass


Event = Union[
    LoadStops,
    StopsLoaded,
    OptimizeRequested,
    FinalizeRequested,
    SolutionReceived,
    RequestFailed,
    StartEdit,
    RemoveStop,
    InsertStop,
    CommitEdit,
    CancelEdit,
    ToggleLock,
    ToggleRouteVisibility,
    ToggleAllRoutes,
    PolygonDrawn,
    PolygonRemoved,
    ClearPolygons,
]


@dataclass(frozen=True)
class FetchStops:
    generation: int
    db_name: str
    kind: RequestKind = RequestKind.STOPS


@dataclass(frozen=True)
class FetchSolution:
    kind: RequestKind
    generation: int
    params: OptimizationParams
    overrides: tuple[LockEntry, ...] = ()


Effect = Union[FetchStops, FetchSolution]


@dataclass(frozen=True)
class Notice:
    level: str
    message: str
    code: Optional[str] = None

    @classmethod
    def info(cls, message: str) -> "Notice":
        return cls("info", message)

    @classmethod
    def warning(cls, message: str, code: Optional[str] = None) -> "Notice":
        return cls("warning", message, code)

    @classmethod
    def error(cls, message: str, code: Optional[str] = None) -> "Notice":
        return cls("error", message, code)


@dataclass
class Reaction:
    notices: list[Notice] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)
