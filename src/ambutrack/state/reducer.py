"""Pure tracker transitions.

``reduce(state, event)`` is the only place where tracker state changes.
It performs no I/O, so every transition can be tested without a network,
a location provider or a renderer.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ambutrack.models.beacon import BeaconStatus
from ambutrack.models.coordinates import Coordinates
from ambutrack.state.events import (
    AlertDismissed,
    BeaconPolled,
    LocationRequested,
    MapClosed,
    ObserverLocated,
    TrackerEvent,
)
from ambutrack.state.policy import should_accept_location


class TrackerState(BaseModel):
    """Immutable snapshot of everything the presentation layer renders.

    Parameters
    ----------
    status : BeaconStatus
        Last status reported by a successful poll.
    beacon_position : Coordinates or None
        Beacon position from the last successful poll.
    observer_position : Coordinates or None
        Last accepted observer fix. Kept when the map is closed.
    alert_visible : bool
        Whether the alert is shown.
    map_visible : bool
        Whether the map panel was requested by a successful location
        request. Set on every accepted fix, even before any poll has
        reported a beacon position; :attr:`map_renderable` tells whether
        there is actually a map to draw.
    location_request_id : int
        Id of the most recently issued location request (``0`` if none).
    last_polled_at : datetime or None
        Observation time of the last successful poll.
    observer_located_at : datetime or None
        Observation time of the last accepted observer fix.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: BeaconStatus = BeaconStatus.OFF
    beacon_position: Coordinates | None = None
    observer_position: Coordinates | None = None
    alert_visible: bool = False
    map_visible: bool = False
    location_request_id: int = 0
    last_polled_at: datetime | None = None
    observer_located_at: datetime | None = None

    @property
    def map_renderable(self) -> bool:
        """The map has nothing to draw without both positions."""
        return self.map_visible and self.observer_position is not None and self.beacon_position is not None


def reduce(state: TrackerState, event: TrackerEvent) -> TrackerState:
    """Apply *event* to *state* and return the resulting state.

    Unknown event types, and observer fixes from superseded requests,
    return *state* unchanged (the same object).
    """

    if isinstance(event, BeaconPolled):
        snapshot = event.snapshot
        update: dict[str, object] = {
            "status": snapshot.status,
            # Overwrite even when the poll carries no fix.
            "beacon_position": snapshot.position,
            "last_polled_at": event.observed_at,
        }
        # Re-asserted on every ON poll, including after a dismissal.
        if snapshot.status == BeaconStatus.ON:
            update["alert_visible"] = True
        return state.model_copy(update=update)

    if isinstance(event, LocationRequested):
        if event.request_id <= state.location_request_id:
            return state
        return state.model_copy(update={"location_request_id": event.request_id})

    if isinstance(event, ObserverLocated):
        if not should_accept_location(
            latest_request_id=state.location_request_id,
            incoming_request_id=event.request_id,
        ):
            return state
        return state.model_copy(
            update={
                "observer_position": event.coordinates,
                "observer_located_at": event.observed_at,
                "map_visible": True,
                "alert_visible": False,
            }
        )

    if isinstance(event, AlertDismissed):
        if not state.alert_visible:
            return state
        return state.model_copy(update={"alert_visible": False})

    if isinstance(event, MapClosed):
        if not state.map_visible:
            return state
        return state.model_copy(update={"map_visible": False})

    return state
