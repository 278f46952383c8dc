"""Snapshot of the console state for the browser."""

from __future__ import annotations

from typing import Iterable

from ...models.domain import Stop, is_depot
from ...schemas.console import (
    BoundsView,
    ConsoleView,
    ControlsView,
    EditingView,
    LockedRouteView,
    OptimizationParamsModel,
    OverlayView,
    RouteView,
    StopView,
)
from ..editing.validation import validate_route
from ..geospatial import format_minutes_to_time
from .context import ConsoleContext
from .events import RequestKind


def _stop_views(stops: Iterable[Stop], depot_prefix: str) -> list[StopView]:
    return [
        StopView(
            id=stop.id,
            name=stop.name,
            latitude=stop.latitude,
            longitude=stop.longitude,
            demand=stop.demand,
            arrival=format_minutes_to_time(stop.arrival_time),
            depot=is_depot(stop, depot_prefix),
        )
        for stop in stops
    ]


def build_view(context: ConsoleContext) -> ConsoleView:
    prefix = context.depot_prefix
    session = context.session
    solution = context.solution

    routes: list[RouteView] = []
    if solution is not None:
        for bus_id, route in solution.routes.items():
            editing = session.bus_id == bus_id
            stops = session.working_stops if editing else context.displayed_stops.get(bus_id, tuple(route.stops))
            routes.append(
                RouteView(
                    bus_id=bus_id,
                    color=route.color,
                    route_time_minutes=route.route_time_minutes,
                    final_load=route.final_load,
                    locked=context.ledger.has(bus_id),
                    visible=context.visible.get(bus_id, True),
                    editing=editing,
                    stops=_stop_views(stops, prefix),
                )
            )

    editing_view = None
    if session.is_editing:
        editing_view = EditingView(
            bus_id=session.bus_id,
            original_stops=_stop_views(session.original_stops, prefix),
            working_stops=_stop_views(session.working_stops, prefix),
        )

    locked_routes = []
    for entry in context.ledger.to_override_list():
        validation = validate_route(entry.bus_id, entry.stops, context.params.capacity, prefix)
        locked_routes.append(
            LockedRouteView(
                bus_id=entry.bus_id,
                stop_count=len(entry.stops),
                final_load=validation.final_load,
                capacity_valid=validation.capacity_valid,
                message=validation.message,
            )
        )

    controls = ControlsView(
        load_stops_enabled=RequestKind.STOPS not in context.in_flight,
        optimize_enabled=RequestKind.OPTIMIZE not in context.in_flight,
        finalize_visible=not context.ledger.is_empty(),
        finalize_enabled=RequestKind.REOPTIMIZE not in context.in_flight,
    )

    overlays = [
        OverlayView(
            overlay_id=overlay.overlay_id,
            kind=overlay.kind.value,
            path=overlay.path,
            title=overlay.title,
            color=overlay.color,
            z_index=overlay.z_index,
            small=overlay.small,
            visible=overlay.visible,
            bus_id=overlay.bus_id,
        )
        for overlay in context.canvas.attached()
    ]
    bounds = context.canvas.bounds

    return ConsoleView(
        status=context.status,
        params=OptimizationParamsModel(
            time_limit=context.params.time_limit,
            capacity=context.params.capacity,
            service_time=context.params.service_time,
            db_name=context.params.db_name,
        ),
        used_buses=solution.used_bus_count if solution else None,
        total_objective_cost=solution.total_objective_cost if solution else None,
        routes=routes,
        editing=editing_view,
        locked_routes=locked_routes,
        controls=controls,
        overlays=overlays,
        bounds=BoundsView(south=bounds.south, west=bounds.west, north=bounds.north, east=bounds.east) if bounds else None,
        polygons=[list(polygon) for polygon in context.polygons],
        stops_in_polygon=_stop_views(context.stops_in_polygon, prefix),
    )
