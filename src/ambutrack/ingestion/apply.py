"""Ingestion application helpers.

This module centralizes the common pattern used by the polling and
location paths:

- parse a raw endpoint payload into a typed Pydantic model
- wrap a model into a :class:`ambutrack.state.events.TrackerEvent`
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ambutrack.exceptions import BeaconPollError
from ambutrack.ingestion.normalize import unwrap_payload
from ambutrack.models.beacon import BeaconSnapshot
from ambutrack.models.coordinates import Coordinates
from ambutrack.state.events import BeaconPolled, ObserverLocated


def parse_beacon_payload(payload: Any, *, endpoint: str = "") -> BeaconSnapshot:
    """Validate a decoded endpoint body into a :class:`BeaconSnapshot`.

    Raises :class:`BeaconPollError` when the body is not a status object.
    """

    record = unwrap_payload(payload)
    if not isinstance(record, dict):
        raise BeaconPollError(
            f"Unexpected payload type from {endpoint or 'endpoint'}: {type(record).__name__}",
            endpoint=endpoint,
        )
    try:
        return BeaconSnapshot.model_validate(record)
    except ValidationError as exc:
        raise BeaconPollError(
            f"Invalid beacon payload from {endpoint or 'endpoint'}: {exc.error_count()} error(s)",
            endpoint=endpoint,
        ) from exc


def build_poll_event(snapshot: BeaconSnapshot) -> BeaconPolled:
    return BeaconPolled(snapshot=snapshot)


def build_location_event(request_id: int, coordinates: Coordinates) -> ObserverLocated:
    return ObserverLocated(request_id=request_id, coordinates=coordinates)
