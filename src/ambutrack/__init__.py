"""ambutrack - Async tracker for an ambulance beacon and the observer's position."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ambutrack")
except PackageNotFoundError:
    __version__ = "0+local"
from ambutrack.config import TrackerConfig
from ambutrack.exceptions import (
    BeaconPollError,
    LocationAcquisitionError,
    LocationError,
    LocationUnsupportedError,
    TrackerConfigError,
    TrackerError,
)
from ambutrack.geo import haversine_m
from ambutrack.location import (
    CallbackLocationProvider,
    IpGeolocationProvider,
    LocationProvider,
    StaticLocationProvider,
    UnsupportedLocationProvider,
)
from ambutrack.models import BeaconSnapshot, BeaconStatus, Coordinates
from ambutrack.remote import BeaconSource, BeaconStatusClient
from ambutrack.state.reducer import TrackerState, reduce
from ambutrack.tracker import BeaconTracker
from ambutrack.view import StateRenderer, TextRenderer, ViewModel, bind_renderer, build_view_model

__all__ = [
    "__version__",
    "BeaconPollError",
    "BeaconSnapshot",
    "BeaconSource",
    "BeaconStatus",
    "BeaconStatusClient",
    "BeaconTracker",
    "CallbackLocationProvider",
    "Coordinates",
    "IpGeolocationProvider",
    "LocationAcquisitionError",
    "LocationError",
    "LocationProvider",
    "LocationUnsupportedError",
    "StateRenderer",
    "StaticLocationProvider",
    "TextRenderer",
    "TrackerConfig",
    "TrackerConfigError",
    "TrackerError",
    "TrackerState",
    "UnsupportedLocationProvider",
    "ViewModel",
    "bind_renderer",
    "build_view_model",
    "haversine_m",
    "reduce",
]
