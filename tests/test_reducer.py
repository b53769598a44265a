from __future__ import annotations

from datetime import UTC, datetime

from ambutrack.models.beacon import BeaconSnapshot, BeaconStatus
from ambutrack.models.coordinates import Coordinates
from ambutrack.state.events import (
    AlertDismissed,
    BeaconPolled,
    LocationRequested,
    MapClosed,
    ObserverLocated,
    TrackerEvent,
)
from ambutrack.state.reducer import TrackerState, reduce


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _poll(status: str, latitude: float | None = None, longitude: float | None = None) -> BeaconPolled:
    snapshot = BeaconSnapshot.model_validate({"status": status, "latitude": latitude, "longitude": longitude})
    return BeaconPolled(snapshot=snapshot, observed_at=_dt())


def _located(request_id: int, latitude: float, longitude: float) -> ObserverLocated:
    return ObserverLocated(
        request_id=request_id,
        coordinates=Coordinates(latitude=latitude, longitude=longitude),
        observed_at=_dt(),
    )


def _run(*events: TrackerEvent, state: TrackerState | None = None) -> TrackerState:
    current = state or TrackerState()
    for event in events:
        current = reduce(current, event)
    return current


def test_initial_state_defaults() -> None:
    state = TrackerState()

    assert state.status == BeaconStatus.OFF
    assert state.beacon_position is None
    assert state.observer_position is None
    assert state.alert_visible is False
    assert state.map_visible is False
    assert state.location_request_id == 0


def test_on_poll_sets_position_and_alert() -> None:
    state = _run(_poll("ON", 12.9, 77.6))

    assert state.status == BeaconStatus.ON
    assert state.beacon_position == Coordinates(latitude=12.9, longitude=77.6)
    assert state.alert_visible is True
    assert state.map_visible is False
    assert state.last_polled_at == _dt()


def test_off_poll_does_not_raise_alert() -> None:
    state = _run(_poll("OFF", 12.9, 77.6))

    assert state.status == BeaconStatus.OFF
    assert state.alert_visible is False


def test_off_poll_keeps_existing_alert() -> None:
    state = _run(_poll("ON", 12.9, 77.6), _poll("OFF", 12.9, 77.6))

    assert state.status == BeaconStatus.OFF
    assert state.alert_visible is True


def test_poll_without_fix_clears_beacon_position() -> None:
    state = _run(_poll("ON", 12.9, 77.6), _poll("ON", None, None))

    assert state.beacon_position is None


def test_state_reflects_last_poll() -> None:
    state = _run(_poll("ON", 1.0, 2.0), _poll("OFF", 3.0, 4.0), _poll("ON", 5.0, 6.0))

    assert state.status == BeaconStatus.ON
    assert state.beacon_position == Coordinates(latitude=5.0, longitude=6.0)


def test_on_poll_reasserts_alert_after_dismissal() -> None:
    state = _run(_poll("ON", 12.9, 77.6), AlertDismissed())
    assert state.alert_visible is False

    state = _run(_poll("ON", 12.9, 77.6), state=state)
    assert state.alert_visible is True


def test_location_success_opens_map_and_closes_alert() -> None:
    state = _run(_poll("ON", 12.9, 77.6), LocationRequested(request_id=1), _located(1, 12.95, 77.55))

    assert state.observer_position == Coordinates(latitude=12.95, longitude=77.55)
    assert state.map_visible is True
    assert state.alert_visible is False
    assert state.observer_located_at == _dt()


def test_location_success_without_alert_keeps_alert_hidden() -> None:
    state = _run(LocationRequested(request_id=1), _located(1, 12.95, 77.55))

    assert state.map_visible is True
    assert state.alert_visible is False


def test_location_overwrites_previous_fix() -> None:
    state = _run(
        LocationRequested(request_id=1),
        _located(1, 10.0, 10.0),
        LocationRequested(request_id=2),
        _located(2, 11.0, 11.0),
    )

    assert state.observer_position == Coordinates(latitude=11.0, longitude=11.0)


def test_stale_location_resolving_last_is_discarded() -> None:
    # A issued, B issued, B resolves, then A resolves.
    state = _run(
        LocationRequested(request_id=1),
        LocationRequested(request_id=2),
        _located(2, 20.0, 20.0),
        _located(1, 10.0, 10.0),
    )

    assert state.observer_position == Coordinates(latitude=20.0, longitude=20.0)


def test_stale_location_resolving_first_is_discarded() -> None:
    state = _run(
        LocationRequested(request_id=1),
        LocationRequested(request_id=2),
        _located(1, 10.0, 10.0),
    )

    assert state.observer_position is None
    assert state.map_visible is False


def test_location_requested_never_moves_backwards() -> None:
    state = _run(LocationRequested(request_id=3), LocationRequested(request_id=2))

    assert state.location_request_id == 3


def test_dismiss_alert_changes_only_alert() -> None:
    before = _run(_poll("ON", 12.9, 77.6), LocationRequested(request_id=1), _located(1, 1.0, 1.0))
    before = _run(_poll("ON", 12.9, 77.6), state=before)

    after = reduce(before, AlertDismissed())

    assert after.alert_visible is False
    assert after.model_copy(update={"alert_visible": True}) == before


def test_close_map_retains_positions() -> None:
    state = _run(_poll("ON", 12.9, 77.6), LocationRequested(request_id=1), _located(1, 12.95, 77.55))

    closed = reduce(state, MapClosed())

    assert closed.map_visible is False
    assert closed.observer_position == state.observer_position
    assert closed.beacon_position == state.beacon_position
    assert closed.map_renderable is False


def test_map_stays_closed_until_new_location() -> None:
    state = _run(
        _poll("ON", 12.9, 77.6),
        LocationRequested(request_id=1),
        _located(1, 12.95, 77.55),
        MapClosed(),
        _poll("ON", 12.9, 77.6),
        AlertDismissed(),
    )
    assert state.map_visible is False

    state = _run(LocationRequested(request_id=2), _located(2, 12.95, 77.55), state=state)
    assert state.map_visible is True


def test_map_not_renderable_without_beacon_position() -> None:
    state = _run(LocationRequested(request_id=1), _located(1, 12.95, 77.55))

    assert state.map_visible is True
    assert state.map_renderable is False


def test_noop_events_return_same_state() -> None:
    state = TrackerState()

    assert reduce(state, AlertDismissed()) is state
    assert reduce(state, MapClosed()) is state
    assert reduce(state, TrackerEvent()) is state


def test_full_scenario() -> None:
    state = TrackerState()

    state = reduce(state, _poll("ON", 12.9, 77.6))
    assert (state.status, state.beacon_position, state.alert_visible, state.map_visible) == (
        BeaconStatus.ON,
        Coordinates(latitude=12.9, longitude=77.6),
        True,
        False,
    )

    state = _run(LocationRequested(request_id=1), _located(1, 12.95, 77.55), state=state)
    assert state.observer_position == Coordinates(latitude=12.95, longitude=77.55)
    assert state.map_visible is True
    assert state.alert_visible is False

    state = reduce(state, MapClosed())
    assert state.map_visible is False
    assert state.beacon_position == Coordinates(latitude=12.9, longitude=77.6)
    assert state.observer_position == Coordinates(latitude=12.95, longitude=77.55)
