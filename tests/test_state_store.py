from __future__ import annotations

from datetime import UTC, datetime

from ambutrack.models.beacon import BeaconSnapshot
from ambutrack.state.events import AlertDismissed, BeaconPolled, MapClosed
from ambutrack.state.reducer import TrackerState
from ambutrack.state.store import TrackerStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _on_poll() -> BeaconPolled:
    return BeaconPolled(
        snapshot=BeaconSnapshot(status="ON", latitude=12.9, longitude=77.6),
        observed_at=_dt(),
    )


def test_listeners_receive_changed_state() -> None:
    store = TrackerStore()
    seen: list[TrackerState] = []
    store.subscribe(seen.append)

    assert store.apply(_on_poll()) is True

    assert len(seen) == 1
    assert seen[0].alert_visible is True
    assert seen[0] is store.state


def test_unchanged_state_does_not_notify() -> None:
    store = TrackerStore()
    seen: list[TrackerState] = []
    store.subscribe(seen.append)

    assert store.apply(MapClosed()) is False
    assert store.apply(AlertDismissed()) is False
    assert seen == []


def test_identical_poll_does_not_notify_twice() -> None:
    store = TrackerStore()
    seen: list[TrackerState] = []
    store.subscribe(seen.append)

    store.apply(_on_poll())
    store.apply(_on_poll())

    assert len(seen) == 1


def test_unsubscribe_stops_notifications() -> None:
    store = TrackerStore()
    seen: list[TrackerState] = []
    unsubscribe = store.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    store.apply(_on_poll())

    assert seen == []


def test_failing_listener_does_not_block_others() -> None:
    store = TrackerStore()
    seen: list[TrackerState] = []

    def _broken(_state: TrackerState) -> None:
        raise RuntimeError("renderer crashed")

    store.subscribe(_broken)
    store.subscribe(seen.append)

    assert store.apply(_on_poll()) is True
    assert len(seen) == 1
    assert store.state.alert_visible is True
