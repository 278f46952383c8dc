"""Event handlers: ``handler(context, event) -> Reaction``.

Handlers mutate the context and declare network effects; they never perform
I/O themselves. Recoverable failures are raised as ``RouteDeskError`` before
any state is touched, and the dispatcher reports them.
"""

from __future__ import annotations

import logging
from typing import Callable

from ...errors import EditConflict, EmptyLedger, InvalidOperation, RequestInFlight
from ...models.domain import BusRoute, is_depot
from ..editing.validation import validate_route
from ..geospatial import collect_inside, first_polygon
from .context import ConsoleContext
from .events import (
    CancelEdit,
    ClearPolygons,
    CommitEdit,
    Event,
    FetchSolution,
    FetchStops,
    FinalizeRequested,
    InsertStop,
    LoadStops,
    Notice,
    OptimizeRequested,
    PolygonDrawn,
    PolygonRemoved,
    Reaction,
    RemoveStop,
    RequestFailed,
    RequestKind,
    SolutionReceived,
    StartEdit,
    StopsLoaded,
    ToggleAllRoutes,
    ToggleLock,
    ToggleRouteVisibility,
)

logger = logging.getLogger(__name__)


def _require_route(context: ConsoleContext, bus_id: int) -> BusRoute:
    route = context.route(bus_id)
    if route is None:
        raise InvalidOperation(f"Bus {bus_id} is not part of the current solution.")
    return route


def _require_idle(context: ConsoleContext, action: str) -> None:
    if context.session.is_editing:
        raise EditConflict(f"Bus {context.session.bus_id} is being edited. Save or cancel it before {action}.")


def _begin_request(context: ConsoleContext, kind: RequestKind) -> int:
    if kind in context.in_flight:
        raise RequestInFlight(f"A {kind.value} request is already running.")
    context.in_flight.add(kind)
    return context.next_generation()


def refresh_polygon_stops(context: ConsoleContext) -> None:
    polygon = first_polygon(context.polygons)
    context.stops_in_polygon = collect_inside(context.renderer.marker_stops(), polygon) if polygon else []


def show_baseline(context: ConsoleContext) -> None:
    context.renderer.clear()
    context.renderer.draw_stops(context.baseline_stops)
    refresh_polygon_stops(context)


def on_load_stops(context: ConsoleContext, event: LoadStops) -> Reaction:
    _require_idle(context, "reloading stops")
    generation = _begin_request(context, RequestKind.STOPS)
    db_name = event.db_name or context.params.db_name
    context.renderer.clear()
    context.status = f"Loading stops from '{db_name}'..."
    return Reaction(effects=[FetchStops(generation=generation, db_name=db_name)])


def on_stops_loaded(context: ConsoleContext, event: StopsLoaded) -> Reaction:
    context.in_flight.discard(RequestKind.STOPS)
    if context.is_stale(event.generation):
        logger.warning(f"Discarding stale stop list (generation {event.generation} < {context.generation})")
        return Reaction()
    context.baseline_stops = list(event.stops)
    show_baseline(context)
    context.status = f"{len(event.stops)} stops loaded."
    return Reaction(notices=[Notice.info(context.status)])


def on_optimize_requested(context: ConsoleContext, event: OptimizeRequested) -> Reaction:
    _require_idle(context, "optimizing")
    generation = _begin_request(context, RequestKind.OPTIMIZE)
    if event.params is not None:
        context.params = event.params
    context.renderer.clear()
    context.status = "Computing routes..."
    return Reaction(effects=[FetchSolution(kind=RequestKind.OPTIMIZE, generation=generation, params=context.params)])


def on_finalize_requested(context: ConsoleContext, event: FinalizeRequested) -> Reaction:
    if context.ledger.is_empty():
        raise EmptyLedger("No routes are locked.")
    _require_idle(context, "re-optimizing")
    generation = _begin_request(context, RequestKind.REOPTIMIZE)
    if event.params is not None:
        context.params = event.params
    overrides = tuple(context.ledger.to_override_list())
    context.renderer.clear()
    context.status = "Re-optimizing..."
    return Reaction(
        effects=[
            FetchSolution(
                kind=RequestKind.REOPTIMIZE,
                generation=generation,
                params=context.params,
                overrides=overrides,
            )
        ]
    )


def on_solution_received(context: ConsoleContext, event: SolutionReceived) -> Reaction:
    context.in_flight.discard(event.kind)
    if context.is_stale(event.generation):
        logger.warning(
            f"Discarding stale {event.kind.value} response (generation {event.generation} < {context.generation})"
        )
        return Reaction()

    notices = []
    if context.session.is_editing:
        # The working copy belongs to a route that no longer exists.
        bus_id = context.session.bus_id
        context.session.cancel()
        notices.append(
            Notice.warning(f"Edits to bus #{bus_id} were discarded by the new solution.", code="EditDiscarded")
        )

    solution = event.solution
    context.solution = solution
    context.ledger.clear()
    context.displayed_stops = {bus_id: tuple(route.stops) for bus_id, route in solution.routes.items()}
    context.visible = {bus_id: True for bus_id in solution.routes}
    context.renderer.clear()
    context.renderer.draw_solution(solution)
    refresh_polygon_stops(context)
    context.status = f"{solution.used_bus_count} buses required."

    if event.kind is RequestKind.REOPTIMIZE:
        notices.append(Notice.info("Re-optimization finished. Showing the new routes."))
    return Reaction(notices=notices)


def on_request_failed(context: ConsoleContext, event: RequestFailed) -> Reaction:
    context.in_flight.discard(event.kind)
    if context.is_stale(event.generation):
        logger.warning(f"Ignoring failure of superseded {event.kind.value} request: {event.error}")
        return Reaction()
    logger.warning(f"{event.kind.value} request failed: {event.error}")
    show_baseline(context)
    context.status = f"Error: {event.error}"
    return Reaction(notices=[Notice.error(str(event.error), code=type(event.error).__name__)])


def on_start_edit(context: ConsoleContext, event: StartEdit) -> Reaction:
    _require_route(context, event.bus_id)
    context.session.start_edit(event.bus_id, context.displayed_stops[event.bus_id])
    return Reaction()


def on_remove_stop(context: ConsoleContext, event: RemoveStop) -> Reaction:
    removed = context.session.remove_stop(event.index)
    return Reaction(notices=[Notice.info(f"Removed '{removed.name}'.")])


def on_insert_stop(context: ConsoleContext, event: InsertStop) -> Reaction:
    if is_depot(event.stop, context.depot_prefix):
        raise InvalidOperation(f"Depot stop '{event.stop.name}' cannot be added to a route.")
    context.session.insert_stop(event.stop, event.before_stop_id)
    return Reaction(notices=[Notice.info(f"Added '{event.stop.name}'.")])


def on_commit_edit(context: ConsoleContext, event: CommitEdit) -> Reaction:
    bus_id = context.session.bus_id
    stops = context.session.commit()
    context.displayed_stops[bus_id] = stops
    validation = validate_route(bus_id, stops, context.params.capacity, context.depot_prefix)
    notices = [Notice.info(f"Edits to bus #{bus_id} saved and locked.")]
    if not validation.capacity_valid:
        notices.append(Notice.warning(f"Bus #{bus_id} {validation.message}.", code="CapacityExceeded"))
    return Reaction(notices=notices)


def on_cancel_edit(context: ConsoleContext, event: CancelEdit) -> Reaction:
    bus_id = context.session.bus_id
    context.displayed_stops[bus_id] = context.session.cancel()
    return Reaction()


def on_toggle_lock(context: ConsoleContext, event: ToggleLock) -> Reaction:
    _require_route(context, event.bus_id)
    if context.session.bus_id == event.bus_id:
        raise EditConflict(f"Bus {event.bus_id} is being edited. Save or cancel it first.")
    if event.locked:
        context.ledger.set(event.bus_id, context.displayed_stops[event.bus_id])
    else:
        context.ledger.remove(event.bus_id)
    return Reaction()


def on_toggle_route_visibility(context: ConsoleContext, event: ToggleRouteVisibility) -> Reaction:
    _require_route(context, event.bus_id)
    context.visible[event.bus_id] = event.visible
    context.renderer.set_route_visible(event.bus_id, event.visible)
    return Reaction()


def on_toggle_all_routes(context: ConsoleContext, event: ToggleAllRoutes) -> Reaction:
    for bus_id in context.visible:
        context.visible[bus_id] = event.visible
        context.renderer.set_route_visible(bus_id, event.visible)
    return Reaction()


def on_polygon_drawn(context: ConsoleContext, event: PolygonDrawn) -> Reaction:
    if len(set(event.vertices)) < 3:
        raise InvalidOperation("A polygon needs at least three distinct vertices.")
    vertices = list(event.vertices)
    context.polygons.append(vertices)
    context.polygon_overlays.append(context.renderer.draw_polygon(vertices))
    refresh_polygon_stops(context)
    return Reaction()


def on_polygon_removed(context: ConsoleContext, event: PolygonRemoved) -> Reaction:
    if event.index < 0 or event.index >= len(context.polygons):
        raise InvalidOperation(f"Polygon {event.index} does not exist.")
    context.polygons.pop(event.index)
    context.polygon_overlays.pop(event.index).detach()
    refresh_polygon_stops(context)
    return Reaction()


def on_clear_polygons(context: ConsoleContext, event: ClearPolygons) -> Reaction:
    for overlay in context.polygon_overlays:
        overlay.detach()
    context.polygons = []
    context.polygon_overlays = []
    context.stops_in_polygon = []
    return Reaction()


HANDLERS: dict[type, Callable[[ConsoleContext, Event], Reaction]] = {
    LoadStops: on_load_stops,
    StopsLoaded: on_stops_loaded,
    OptimizeRequested: on_optimize_requested,
    FinalizeRequested: on_finalize_requested,
    SolutionReceived: on_solution_received,
    RequestFailed: on_request_failed,
    StartEdit: on_start_edit,
    RemoveStop: on_remove_stop,
    InsertStop: on_insert_stop,
    CommitEdit: on_commit_edit,
    CancelEdit: on_cancel_edit,
    ToggleLock: on_toggle_lock,
    ToggleRouteVisibility: on_toggle_route_visibility,
    ToggleAllRoutes: on_toggle_all_routes,
    PolygonDrawn: on_polygon_drawn,
    PolygonRemoved: on_polygon_removed,
    ClearPolygons: on_clear_polygons,
}


def handle(context: ConsoleContext, event: Event) -> Reaction:
    try:
        handler = HANDLERS[type(event)]
    except KeyError:
        raise TypeError(f"No handler registered for {type(event).__name__}") from None
    return handler(context, event)
