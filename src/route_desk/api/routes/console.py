"""Console endpoints: one POST per dispatcher action, each answering with the new view."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...schemas.console import (
    ConsoleResponse,
    ConsoleView,
    InsertStopRequest,
    LoadStopsRequest,
    LockRequest,
    NoticeModel,
    PolygonRequest,
    RemoveStopRequest,
    RunRequest,
    VisibilityRequest,
)
from ...services.console import Console, ConsoleContext, Notice
from ...services.console.events import (
    CancelEdit,
    ClearPolygons,
    CommitEdit,
    Event,
    FinalizeRequested,
    InsertStop,
    LoadStops,
    OptimizeRequested,
    PolygonDrawn,
    PolygonRemoved,
    RemoveStop,
    StartEdit,
    ToggleAllRoutes,
    ToggleLock,
    ToggleRouteVisibility,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/console", tags=["console"])


def get_console(request: Request) -> Console:
    return request.app.state.console


def _respond(console: Console, notices: Iterable[Notice]) -> ConsoleResponse:
    return ConsoleResponse(
        notices=[NoticeModel(level=notice.level, message=notice.message, code=notice.code) for notice in notices],
        view=console.snapshot(),
    )


def _run(console: Console, event: Event) -> ConsoleResponse:
    try:
        notices = console.dispatch(event)
    except Exception as exc:
        logger.exception(f"Error handling {type(event).__name__}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to handle {type(event).__name__}: {str(exc)}",
        ) from exc
    return _respond(console, notices)


def _run_edit(console: Console, bus_id: int, build_event: Callable[[ConsoleContext], Event]) -> ConsoleResponse:
    """Dispatch an edit action only if ``bus_id`` is the bus under edit, checked under the console lock."""
    with console.exclusive() as context:
        if context.session.bus_id != bus_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Bus {bus_id} is not being edited.",
            )
        return _run(console, build_event(context))


@router.get("/state", response_model=ConsoleView, status_code=status.HTTP_200_OK)
def get_state(console: Console = Depends(get_console)) -> ConsoleView:
    return console.snapshot()


@router.post("/stops/load", response_model=ConsoleResponse)
def load_stops(payload: LoadStopsRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, LoadStops(db_name=payload.db_name))


@router.post("/optimize", response_model=ConsoleResponse)
def optimize(payload: RunRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    params = payload.params.to_domain() if payload.params else None
    return _run(console, OptimizeRequested(params=params))


@router.post("/finalize", response_model=ConsoleResponse)
def finalize(payload: RunRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    """Re-optimize every unlocked route around the locked ones."""
    params = payload.params.to_domain() if payload.params else None
    return _run(console, FinalizeRequested(params=params))


@router.post("/routes/{bus_id}/edit", response_model=ConsoleResponse)
def start_edit(bus_id: int, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, StartEdit(bus_id=bus_id))


@router.post("/routes/{bus_id}/edit/remove", response_model=ConsoleResponse)
def remove_stop(bus_id: int, payload: RemoveStopRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run_edit(console, bus_id, lambda context: RemoveStop(index=payload.index))


@router.post("/routes/{bus_id}/edit/insert", response_model=ConsoleResponse)
def insert_stop(bus_id: int, payload: InsertStopRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    def build_event(context: ConsoleContext) -> InsertStop:
        stop = context.find_stop(payload.stop_id)
        if stop is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Stop {payload.stop_id} is not shown on the map.",
            )
        return InsertStop(stop=stop, before_stop_id=payload.before_stop_id)

    return _run_edit(console, bus_id, build_event)


@router.post("/routes/{bus_id}/edit/commit", response_model=ConsoleResponse)
def commit_edit(bus_id: int, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run_edit(console, bus_id, lambda context: CommitEdit())


@router.post("/routes/{bus_id}/edit/cancel", response_model=ConsoleResponse)
def cancel_edit(bus_id: int, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run_edit(console, bus_id, lambda context: CancelEdit())


@router.post("/routes/{bus_id}/lock", response_model=ConsoleResponse)
def toggle_lock(bus_id: int, payload: LockRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, ToggleLock(bus_id=bus_id, locked=payload.locked))


@router.post("/routes/{bus_id}/visibility", response_model=ConsoleResponse)
def toggle_visibility(bus_id: int, payload: VisibilityRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, ToggleRouteVisibility(bus_id=bus_id, visible=payload.visible))


@router.post("/routes/visibility", response_model=ConsoleResponse)
def toggle_all_routes(payload: VisibilityRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, ToggleAllRoutes(visible=payload.visible))


@router.post("/polygons", response_model=ConsoleResponse)
def draw_polygon(payload: PolygonRequest, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, PolygonDrawn(vertices=tuple(tuple(vertex) for vertex in payload.vertices)))


@router.delete("/polygons/{index}", response_model=ConsoleResponse)
def remove_polygon(index: int, console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, PolygonRemoved(index=index))


@router.delete("/polygons", response_model=ConsoleResponse)
def clear_polygons(console: Console = Depends(get_console)) -> ConsoleResponse:
    return _run(console, ClearPolygons())
