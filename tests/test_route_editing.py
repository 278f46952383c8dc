from dataclasses import replace

import pytest

from route_desk.errors import AnchorNotFound, EditConflict, InvalidOperation, SessionNotActive
from route_desk.services.editing import RouteEditSession, RouteLockLedger, validate_route


@pytest.fixture
def ledger() -> RouteLockLedger:
    return RouteLockLedger()


@pytest.fixture
def session(ledger) -> RouteEditSession:
    return RouteEditSession(ledger, depot_prefix="DEPOT")


def test_edit_scenario_commits_working_stops(session, ledger, stops):
    d, a, b, c, e = (stops[key] for key in "DABCE")
    session.start_edit(7, [d, a, b, e])

    session.remove_stop(1)
    assert session.working_stops == (d, b, e)

    session.insert_stop(c, before_stop_id=e.id)
    assert session.working_stops == (d, b, c, e)

    finalized = session.commit()

    assert finalized == (d, b, c, e)
    assert ledger.get(7) == (d, b, c, e)
    assert session.is_editing is False


def test_start_edit_while_editing_is_rejected_without_side_effects(session, ledger, stops):
    d, a, b, c, e = (stops[key] for key in "DABCE")
    session.start_edit(7, [d, a, b, e])
    session.remove_stop(2)

    for bus_id in (7, 8):
        with pytest.raises(EditConflict):
            session.start_edit(bus_id, [d, c, e])

    assert session.bus_id == 7
    assert session.working_stops == (d, a, e)
    assert session.original_stops == (d, a, b, e)
    assert ledger.is_empty()


def test_depot_removal_is_rejected(session, stops):
    d, a, e = stops["D"], stops["A"], stops["E"]
    session.start_edit(7, [d, a, e])

    for index in (0, 2):
        with pytest.raises(InvalidOperation):
            session.remove_stop(index)

    assert len(session.working_stops) == 3


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_out_of_range_removal_is_rejected(session, stops, index):
    d, a, e = stops["D"], stops["A"], stops["E"]
    session.start_edit(7, [d, a, e])

    with pytest.raises(InvalidOperation):
        session.remove_stop(index)

    assert session.working_stops == (d, a, e)


def test_insert_with_unknown_anchor_keeps_working_stops(session, stops):
    d, a, c, e = (stops[key] for key in "DACE")
    session.start_edit(7, [d, a, e])

    with pytest.raises(AnchorNotFound):
        session.insert_stop(c, before_stop_id="missing")

    assert session.working_stops == (d, a, e)


def test_insert_uses_first_stop_sharing_the_anchor_id(session, stops):
    # The optimizer splits busy stops into virtual stops sharing one id.
    d, a, c, e = (stops[key] for key in "DACE")
    a_split = replace(a, name=f"{a.name}-2", demand=5)
    session.start_edit(7, [d, a, a_split, e])

    position = session.insert_stop(c, before_stop_id=a.id)

    assert position == 1
    assert session.working_stops == (d, c, a, a_split, e)


def test_cancel_returns_original_and_leaves_ledger_alone(session, ledger, stops):
    d, a, b, c, e = (stops[key] for key in "DABCE")
    ledger.set(8, [d, c, e])
    session.start_edit(7, [d, a, b, e])
    session.remove_stop(1)
    session.insert_stop(c, before_stop_id=e.id)

    restored = session.cancel()

    assert restored == (d, a, b, e)
    assert ledger.to_override_list()[0].stops == (d, c, e)
    assert ledger.has(7) is False
    assert session.is_editing is False


def test_session_methods_while_idle_are_programming_errors(session, stops):
    with pytest.raises(SessionNotActive):
        session.remove_stop(0)
    with pytest.raises(SessionNotActive):
        session.insert_stop(stops["A"], before_stop_id="DEPOT_0")
    with pytest.raises(SessionNotActive):
        session.commit()
    with pytest.raises(SessionNotActive):
        session.cancel()


def test_snapshot_is_immune_to_caller_mutation(session, stops):
    d, a, e = stops["D"], stops["A"], stops["E"]
    source = [d, a, e]
    session.start_edit(7, source)
    source.clear()

    assert session.original_stops == (d, a, e)
    assert session.working_stops == (d, a, e)


def test_override_list_follows_insertion_order(ledger, stops):
    d, a, b, c, e = (stops[key] for key in "DABCE")
    ledger.set(9, [d, a, e])
    ledger.set(3, [d, b, e])
    ledger.set(5, [d, c, e])
    ledger.set(9, [d, e])
    ledger.remove(3)
    ledger.remove(42)

    overrides = ledger.to_override_list()

    assert [entry.bus_id for entry in overrides] == [9, 5]
    assert overrides[0].stops == (d, e)
    assert len(overrides) == len(ledger) == 2


def test_ledger_clear(ledger, stops):
    ledger.set(1, [stops["D"]])
    assert ledger.has(1) and 1 in ledger
    ledger.clear()
    assert ledger.is_empty()
    assert ledger.to_override_list() == []


def test_validate_route_skips_depots_and_flags_overload(stops):
    d, a, b, c, e = (stops[key] for key in "DABCE")

    ok = validate_route(7, [d, a, b, e], capacity=45, depot_prefix="DEPOT")
    assert ok.final_load == 25
    assert ok.capacity_valid is True

    overloaded = validate_route(7, [d, a, b, c, e], capacity=40, depot_prefix="DEPOT")
    assert overloaded.final_load == 45
    assert overloaded.capacity_valid is False
    assert "40" in overloaded.message
