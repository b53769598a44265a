"""Normalized tracker events.

Every input to the tracker (beacon polls, observer fixes, user actions)
is converted into one of these events. Only the state layer is allowed to
fold them into :class:`ambutrack.state.reducer.TrackerState`.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ambutrack.models.beacon import BeaconSnapshot
from ambutrack.models.coordinates import Coordinates


class TrackerEvent(BaseModel):
    """Base for all events applied to the tracker state."""

    model_config = ConfigDict(frozen=True)

    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class BeaconPolled(TrackerEvent):
    """A poll of the beacon endpoint succeeded."""

    snapshot: BeaconSnapshot


class LocationRequested(TrackerEvent):
    """The observer asked for their own position."""

    request_id: int = Field(..., ge=1)


class ObserverLocated(TrackerEvent):
    """An observer location request resolved with a fix."""

    request_id: int = Field(..., ge=1)
    coordinates: Coordinates


class AlertDismissed(TrackerEvent):
    """The observer dismissed the alert."""


class MapClosed(TrackerEvent):
    """The observer closed the map panel."""
