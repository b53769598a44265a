"""Presentation contract.

Renderers never read tracker internals. They receive a :class:`ViewModel`
derived from a :class:`TrackerState` by :func:`build_view_model` and draw
it however they like (terminal, web page, notification).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import IO, Protocol

from pydantic import BaseModel, ConfigDict

from ambutrack._constants import (
    ALERT_MESSAGE,
    ALERT_TITLE,
    COORDINATE_DECIMALS,
    DISTANCE_MODE_HAVERSINE,
    DISTANCE_MODE_PLACEHOLDER,
    MAP_ZOOM,
    MISSING_TEXT,
    PLACEHOLDER_DISTANCE_KM,
)
from ambutrack.geo import format_distance, haversine_m
from ambutrack.models.beacon import BeaconStatus
from ambutrack.models.coordinates import Coordinates
from ambutrack.state.reducer import TrackerState


class MapMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    position: Coordinates


class AlertPanel(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ALERT_TITLE
    message: str = ALERT_MESSAGE
    actions: tuple[str, ...] = ("Dismiss", "View Map")


class MapPanel(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: Coordinates
    zoom: int = MAP_ZOOM
    markers: tuple[MapMarker, ...]
    distance_m: float | None
    distance_text: str
    actions: tuple[str, ...] = ("Close",)


class ViewModel(BaseModel):
    """Everything a renderer needs for one frame.

    ``alert`` is set iff the alert is visible; ``map`` is set iff the map is
    visible and both positions are known.
    """

    model_config = ConfigDict(frozen=True)

    status_label: str
    status_tone: str
    latitude_text: str
    longitude_text: str
    alert: AlertPanel | None = None
    map: MapPanel | None = None


def _format_coordinate(value: float | None) -> str:
    if value is None:
        return MISSING_TEXT
    return f"{value:.{COORDINATE_DECIMALS}f}"


def _distance(observer: Coordinates, beacon: Coordinates, distance_mode: str) -> tuple[float | None, str]:
    if distance_mode == DISTANCE_MODE_PLACEHOLDER:
        return None, f"{PLACEHOLDER_DISTANCE_KM} km"
    meters = haversine_m(observer, beacon)
    return meters, format_distance(meters)


def build_view_model(state: TrackerState, *, distance_mode: str = DISTANCE_MODE_HAVERSINE) -> ViewModel:
    beacon = state.beacon_position
    map_panel: MapPanel | None = None
    if state.map_renderable:
        observer = state.observer_position
        assert observer is not None and beacon is not None  # noqa: S101
        distance_m, distance_text = _distance(observer, beacon, distance_mode)
        map_panel = MapPanel(
            center=observer,
            markers=(
                MapMarker(label="Your Location", position=observer),
                MapMarker(label="Ambulance Location", position=beacon),
            ),
            distance_m=distance_m,
            distance_text=distance_text,
        )

    return ViewModel(
        status_label=state.status.value,
        status_tone="ok" if state.status == BeaconStatus.ON else "alert",
        latitude_text=_format_coordinate(beacon.latitude if beacon else None),
        longitude_text=_format_coordinate(beacon.longitude if beacon else None),
        alert=AlertPanel() if state.alert_visible else None,
        map=map_panel,
    )


class StateRenderer(Protocol):
    """Anything that can draw a :class:`ViewModel`."""

    def render(self, view: ViewModel) -> None:
        ...


def bind_renderer(
    renderer: StateRenderer, *, distance_mode: str = DISTANCE_MODE_HAVERSINE
) -> Callable[[TrackerState], None]:
    """Adapt *renderer* into a state listener for ``BeaconTracker.subscribe``."""

    def _listener(state: TrackerState) -> None:
        renderer.render(build_view_model(state, distance_mode=distance_mode))

    return _listener


class TextRenderer:
    """Writes a plain-text frame per state change to *stream*."""

    def __init__(self, stream: IO[str], *, distance_mode: str = DISTANCE_MODE_HAVERSINE) -> None:
        self._stream = stream
        self._distance_mode = distance_mode

    def __call__(self, state: TrackerState) -> None:
        self.render(build_view_model(state, distance_mode=self._distance_mode))

    def render(self, view: ViewModel) -> None:
        lines = [
            f"Status: {view.status_label}",
            f"Latitude: {view.latitude_text}  Longitude: {view.longitude_text}",
        ]
        if view.alert is not None:
            lines.append(f"[{view.alert.title}] {view.alert.message} ({' / '.join(view.alert.actions)})")
        if view.map is not None:
            for marker in view.map.markers:
                lines.append(
                    f"  {marker.label}: {_format_coordinate(marker.position.latitude)}, "
                    f"{_format_coordinate(marker.position.longitude)}"
                )
            lines.append(f"  Your location to ambulance: {view.map.distance_text}")
        self._stream.write("\n".join(lines) + "\n\n")
        self._stream.flush()
